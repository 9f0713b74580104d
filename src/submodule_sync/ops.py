import logging
from collections.abc import Callable

from rich.console import Console
from rich.markup import escape

from .config import Config
from .constants import APP_NAME
from .git_wrapper import GitRepo

console = Console()
logger = logging.getLogger(APP_NAME)


def print_step(message: str) -> None:
    """Prints a step marker before a command sequence starts."""
    console.print(f"[bold blue]==>[/bold blue] {message}")


def print_success(message: str) -> None:
    """Prints a success marker once every step of a sequence has finished."""
    console.print(f"[bold green]✓[/bold green] {message}")


def sync_parent(repo: GitRepo, config: Config) -> None:
    """Fetches the parent repository and pulls its default branch.

    Args:
        repo (GitRepo): The parent repository.
        config (Config): Supplies the remote and branch to pull.
    """
    repo.fetch()
    repo.pull(config.core.remote_name, config.core.parent_branch)


def foreach_submodule(repo: GitRepo, action: Callable[[GitRepo], None]) -> None:
    """Applies `action` to every initialized top-level submodule, in order.

    The first exception raised by `action` propagates and the remaining
    submodules are left untouched.

    Args:
        repo (GitRepo): The parent repository.
        action (Callable[[GitRepo], None]): The operation to run per submodule.
    """
    for submodule in repo.submodules():
        console.print(
            f"Entering '{submodule.path.relative_to(repo.path)}'", markup=False
        )
        action(submodule)


def checkout_first_available(repo: GitRepo, branches: list[str]) -> str:
    """Checks out the first branch in `branches` that git accepts.

    Args:
        repo (GitRepo): The repository to switch.
        branches (list[str]): Candidate branch names, most preferred first.

    Returns:
        str: The branch that was checked out.

    Raises:
        RuntimeError: The last candidate's checkout error, when none succeeds.
    """
    for index, branch in enumerate(branches):
        try:
            repo.checkout(branch)
            return branch
        except RuntimeError as e:
            if index == len(branches) - 1:
                raise
            logger.info(f"Checkout of '{branch}' failed in {repo.path.name}: {e}")
    raise ValueError("No branch candidates given")


def pull_current_branch(repo: GitRepo, remote: str) -> None:
    """Pulls whatever branch is currently checked out from `remote`."""
    branch = repo.current_branch()
    if not branch:
        raise RuntimeError(f"Cannot pull in {repo.path.name}: HEAD is detached")
    repo.pull(remote, branch)


def setup(repo: GitRepo, config: Config) -> None:
    """Syncs the parent and initializes every submodule at its pinned commit."""
    print_step("Setting up submodules...")
    sync_parent(repo, config)
    repo.submodule_update()
    print_success("Submodules initialized")


def update_main(repo: GitRepo, config: Config) -> None:
    """Moves every submodule onto its main line (main, falling back to master)."""
    remote = config.core.remote_name
    candidates = config.branches.main

    print_step("Updating to main branch...")
    sync_parent(repo, config)
    repo.submodule_update()
    foreach_submodule(repo, lambda sm: sm.fetch())
    foreach_submodule(repo, lambda sm: checkout_first_available(sm, candidates))
    foreach_submodule(repo, lambda sm: pull_current_branch(sm, remote))
    print_success(f"All submodules updated to {escape('/'.join(candidates))}")


def update_develop(repo: GitRepo, config: Config) -> None:
    """Moves every submodule onto the develop branch. There is no fallback."""
    remote = config.core.remote_name
    branch = config.branches.develop

    print_step(f"Updating to {escape(branch)} branch...")
    sync_parent(repo, config)
    repo.submodule_update()
    foreach_submodule(repo, lambda sm: sm.fetch())
    foreach_submodule(repo, lambda sm: sm.checkout(branch))
    foreach_submodule(repo, lambda sm: sm.pull(remote, branch))
    print_success(f"All submodules updated to {escape(branch)}")
