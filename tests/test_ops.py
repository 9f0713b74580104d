import io
from pathlib import Path
from unittest.mock import MagicMock, call

import pytest
from rich.console import Console

from submodule_sync import ops
from submodule_sync.config import Config


@pytest.fixture
def parent(tmp_path: Path, mocker: MagicMock) -> MagicMock:
    """A mocked parent repository with no submodules."""
    mocker.patch("submodule_sync.ops.console")
    repo = mocker.MagicMock()
    repo.path = tmp_path
    repo.submodules.return_value = []
    return repo


def make_submodule(
    parent: MagicMock, name: str, journal: list[str], missing: set[str] = frozenset()
) -> MagicMock:
    """Builds a mocked submodule that records each git step into `journal`.

    Args:
        parent (MagicMock): The parent repository mock.
        name (str): The submodule directory name.
        journal (list[str]): Shared list receiving '<name>:<step>' entries.
        missing (set[str]): Branch names whose checkout fails.
    """
    sub = MagicMock()
    sub.path = parent.path / name
    state = {"branch": ""}

    def checkout(branch: str) -> None:
        journal.append(f"{name}:checkout {branch}")
        if branch in missing:
            raise RuntimeError(f"Git error: pathspec '{branch}' did not match")
        state["branch"] = branch

    sub.fetch.side_effect = lambda: journal.append(f"{name}:fetch")
    sub.checkout.side_effect = checkout
    sub.current_branch.side_effect = lambda: state["branch"]
    sub.pull.side_effect = lambda remote, branch: journal.append(
        f"{name}:pull {remote} {branch}"
    )
    return sub


def test_setup_sequence(parent: MagicMock) -> None:
    """Verifies that setup syncs the parent then initializes submodules."""
    ops.setup(parent, Config())

    assert parent.mock_calls == [
        call.fetch(),
        call.pull("origin", "main"),
        call.submodule_update(),
    ]


def test_update_main_runs_phases_across_all_submodules(parent: MagicMock) -> None:
    """Verifies that every submodule is fetched before any is checked out or pulled."""
    journal: list[str] = []
    parent.submodules.return_value = [
        make_submodule(parent, "api", journal),
        make_submodule(parent, "frontend", journal),
    ]

    ops.update_main(parent, Config())

    assert journal == [
        "api:fetch",
        "frontend:fetch",
        "api:checkout main",
        "frontend:checkout main",
        "api:pull origin main",
        "frontend:pull origin main",
    ]
    parent.fetch.assert_called_once_with()
    parent.pull.assert_called_once_with("origin", "main")
    parent.submodule_update.assert_called_once_with()


def test_update_main_falls_back_to_master(parent: MagicMock) -> None:
    """Verifies that a submodule without `main` is moved to `master` alone."""
    journal: list[str] = []
    parent.submodules.return_value = [
        make_submodule(parent, "api", journal),
        make_submodule(parent, "legacy", journal, missing={"main"}),
    ]

    ops.update_main(parent, Config())

    assert "api:checkout master" not in journal
    assert journal[2:] == [
        "api:checkout main",
        "legacy:checkout main",
        "legacy:checkout master",
        "api:pull origin main",
        "legacy:pull origin master",
    ]


def test_update_main_fails_without_any_candidate(parent: MagicMock) -> None:
    """Verifies that a submodule with neither branch aborts the whole command."""
    journal: list[str] = []
    parent.submodules.return_value = [
        make_submodule(parent, "orphan", journal, missing={"main", "master"}),
        make_submodule(parent, "api", journal),
    ]

    with pytest.raises(RuntimeError, match="'master' did not match"):
        ops.update_main(parent, Config())

    assert "api:checkout main" not in journal
    assert not any(":pull" in entry for entry in journal)


def test_update_develop_has_no_fallback(parent: MagicMock) -> None:
    """Verifies that develop is the only checkout target."""
    journal: list[str] = []
    parent.submodules.return_value = [
        make_submodule(parent, "api", journal, missing={"develop"}),
    ]

    with pytest.raises(RuntimeError):
        ops.update_develop(parent, Config())

    assert journal == ["api:fetch", "api:checkout develop"]


def test_update_develop_sequence(parent: MagicMock) -> None:
    """Verifies that develop is checked out and pulled explicitly."""
    journal: list[str] = []
    parent.submodules.return_value = [make_submodule(parent, "api", journal)]

    ops.update_develop(parent, Config())

    assert journal == [
        "api:fetch",
        "api:checkout develop",
        "api:pull origin develop",
    ]


def test_parent_failure_halts_sequence(parent: MagicMock) -> None:
    """Verifies that nothing runs after the parent pull fails."""
    parent.pull.side_effect = RuntimeError("Git error: merge conflict")

    with pytest.raises(RuntimeError, match="merge conflict"):
        ops.update_develop(parent, Config())

    parent.submodule_update.assert_not_called()
    parent.submodules.assert_not_called()


def test_success_marker_only_after_completion(parent: MagicMock) -> None:
    """Verifies that the success line is withheld when a step fails."""
    parent.submodule_update.side_effect = RuntimeError("Git error: offline")

    with pytest.raises(RuntimeError):
        ops.setup(parent, Config())

    printed = " ".join(str(c) for c in ops.console.print.call_args_list)
    assert "Setting up submodules..." in printed
    assert "Submodules initialized" not in printed


def test_configured_branches_and_remote(parent: MagicMock) -> None:
    """Verifies that the configured remote and candidates drive every step."""
    journal: list[str] = []
    parent.submodules.return_value = [
        make_submodule(parent, "api", journal, missing={"trunk"})
    ]
    conf = Config()
    conf.core.remote_name = "upstream"
    conf.core.parent_branch = "master"
    conf.branches.main = ["trunk", "main"]

    ops.update_main(parent, conf)

    parent.pull.assert_called_once_with("upstream", "master")
    assert journal[-1] == "api:pull upstream main"


def test_checkout_first_available_returns_branch(parent: MagicMock) -> None:
    """Verifies which candidate is reported as checked out."""
    journal: list[str] = []
    sub = make_submodule(parent, "api", journal, missing={"main"})

    assert ops.checkout_first_available(sub, ["main", "master"]) == "master"


def test_pull_current_branch_rejects_detached_head(parent: MagicMock) -> None:
    """Verifies that a detached HEAD cannot be pulled."""
    sub = make_submodule(parent, "api", [])

    with pytest.raises(RuntimeError, match="detached"):
        ops.pull_current_branch(sub, "origin")
    sub.pull.assert_not_called()


def test_branch_names_are_printed_literally(
    parent: MagicMock, mocker: MagicMock
) -> None:
    """Verifies that bracketed branch names are not parsed as console markup."""
    output = Console(file=io.StringIO(), width=200)
    mocker.patch.object(ops, "console", output)
    journal: list[str] = []
    parent.submodules.return_value = [make_submodule(parent, "api", journal)]
    conf = Config()
    conf.branches.develop = "[red]release[/red]"
    conf.branches.main = ["[trunk]"]

    ops.update_develop(parent, conf)
    ops.update_main(parent, conf)

    printed = output.file.getvalue()
    assert "Updating to [red]release[/red] branch..." in printed
    assert "All submodules updated to [red]release[/red]" in printed
    assert "All submodules updated to [trunk]" in printed
