import logging
import subprocess
from pathlib import Path

from .constants import APP_NAME

logger = logging.getLogger(APP_NAME)


def find_repo_root(start: Path) -> Path:
    """Walks up from `start` to the first directory containing a `.git` entry.

    Args:
        start (Path): The directory to begin the search from.

    Returns:
        Path: The working tree root.

    Raises:
        ValueError: If `start` is not a directory, or no enclosing git
            repository exists.
    """
    start = start.resolve()
    if not start.is_dir():
        raise ValueError(f"Not a directory: {start}")
    for candidate in (start, *start.parents):
        if (candidate / ".git").exists():
            return candidate
    raise ValueError(f"Not a git repository (or any parent): {start}")


class GitRepo:
    """A wrapper around the Git command-line interface for a specific working tree.

    The same class serves the parent repository and each of its submodules; a
    submodule's `.git` is a file pointing into the parent's module store, which
    satisfies the same existence check as a regular `.git` directory.

    Attributes:
        path (Path): The file system path to the working tree root.
    """

    def __init__(self, path: Path):
        """Initializes the GitRepo instance.

        Args:
            path (Path): The path to the working tree root directory.

        Raises:
            ValueError: If the specified path does not contain a .git entry.
        """
        self.path = path
        if not (self.path / ".git").exists():
            raise ValueError(f"Not a git repository: {self.path}")

    def _run(self, args: list[str], capture: bool = True) -> str:
        """Executes a Git command within the repository context.

        Args:
            args (list[str]): A list of arguments to pass to the git command.
            capture (bool, optional):   Whether to capture and return stdout.
                                        When False, git writes straight to the
                                        terminal. Defaults to True.

        Returns:
            str:    The stripped stdout of the command if capture is True,
                    otherwise an empty string.

        Raises:
            RuntimeError: If the git command returns a non-zero exit code.
        """
        logger.debug(f"git {' '.join(args)} (in {self.path})")
        try:
            res = subprocess.run(
                ["git", *args],
                cwd=self.path,
                capture_output=capture,
                text=True,
                check=True,
            )
            return res.stdout.strip() if capture else ""
        except subprocess.CalledProcessError as e:
            raise RuntimeError(f"Git error: {e.stderr or e}") from e

    def current_branch(self) -> str:
        """Retrieves the name of the currently checked-out branch.

        Returns:
            str: The branch name, or an empty string on a detached HEAD.
        """
        return self._run(["branch", "--show-current"])

    def fetch(self) -> None:
        """Fetches from the default remote."""
        self._run(["fetch"], capture=False)

    def pull(self, remote: str, branch: str) -> None:
        """Pulls a branch from a remote into the current branch.

        Args:
            remote (str): The remote name (e.g., 'origin').
            branch (str): The remote branch to pull.
        """
        self._run(["pull", remote, branch], capture=False)

    def checkout(self, branch: str) -> None:
        """Checks out a branch.

        Args:
            branch (str): The target branch name.
        """
        self._run(["checkout", branch], capture=False)

    def submodule_update(self) -> None:
        """Initializes and updates every submodule, including nested ones."""
        self._run(["submodule", "update", "--init", "--recursive"], capture=False)

    def submodule_paths(self) -> list[str]:
        """Lists the initialized top-level submodules in `foreach` order.

        Returns:
            list[str]: Submodule paths relative to the repository root.
        """
        output = self._run(["submodule", "foreach", "--quiet", 'echo "$sm_path"'])
        return output.splitlines() if output else []

    def submodules(self) -> list["GitRepo"]:
        """Returns a GitRepo for each initialized top-level submodule."""
        return [GitRepo(self.path / sm_path) for sm_path in self.submodule_paths()]
