import argparse
import logging
import sys
from collections.abc import Callable, Iterable
from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from . import ops
from .config import Config
from .constants import APP_NAME
from .git_wrapper import GitRepo, find_repo_root

logger = logging.getLogger(APP_NAME)
console = Console()


class Command(Enum):
    """The closed set of actions the CLI can perform."""

    SETUP = "setup"
    UPDATE_MAIN = "update-main"
    UPDATE_DEVELOP = "update-develop"
    HELP = "help"

    @classmethod
    def from_name(cls, name: str | None) -> "Command | None":
        """Resolves a command name or alias. A missing name means HELP.

        Returns:
            Command | None: The matching command, or None if the name is unknown.
        """
        if not name:
            return cls.HELP
        for command, names in COMMAND_NAMES.items():
            if name in names:
                return command
        return None


COMMAND_NAMES: dict[Command, tuple[str, ...]] = {
    Command.SETUP: ("setup",),
    Command.UPDATE_MAIN: ("update-main", "main", "master"),
    Command.UPDATE_DEVELOP: ("update-develop", "develop"),
    Command.HELP: ("help",),
}
"""dict[Command, tuple[str, ...]]: Canonical name first, then aliases."""

COMMAND_HELP: dict[Command, str] = {
    Command.SETUP: "Initialize and setup all submodules",
    Command.UPDATE_MAIN: "Update all submodules to main/master branch",
    Command.UPDATE_DEVELOP: "Update all submodules to develop branch",
    Command.HELP: "Show this help message",
}

OPERATIONS: dict[Command, Callable[[GitRepo, Config], None]] = {
    Command.SETUP: ops.setup,
    Command.UPDATE_MAIN: ops.update_main,
    Command.UPDATE_DEVELOP: ops.update_develop,
}

EXAMPLES = f"""Examples:
  {APP_NAME} setup
  {APP_NAME} update-develop"""


class SyncHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Help formatter that expands the `command` positional into a command table.

    Each command is listed with its description and any aliases, in place of
    the single `command` line argparse would otherwise render.
    """

    def add_usage(
        self,
        usage: str | None,
        actions: Iterable[argparse.Action],
        groups: Iterable[argparse._MutuallyExclusiveGroup],
        prefix: str | None = None,
    ) -> None:
        if prefix is None:
            prefix = "Usage: "
        super().add_usage(usage, actions, groups, prefix)

    def _format_action(self, action: argparse.Action) -> str:
        if action.dest == "command":
            indent = " " * self._current_indent
            parts = []
            for command in Command:
                canonical, *aliases = COMMAND_NAMES[command]
                line = f"{indent}{canonical:<16}{COMMAND_HELP[command]}"
                if aliases:
                    line += f" (aliases: {', '.join(aliases)})"
                parts.append(line + "\n")
            return self._join_parts(parts)

        return super()._format_action(action)


class SyncArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit code 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        console.print(f"Error: {message}", markup=False, highlight=False)
        console.print()
        self.print_help()
        sys.exit(1)


def build_parser() -> SyncArgumentParser:
    """Builds the argument parser for the CLI."""
    parser = SyncArgumentParser(
        prog=APP_NAME,
        usage="%(prog)s [command]",
        epilog=EXAMPLES,
        formatter_class=SyncHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )

    commands = parser.add_argument_group("Commands")
    commands.add_argument("command", nargs="?", help="The command to run")

    options = parser.add_argument_group("Options")
    options.add_argument(
        "-h", "--help", action="store_true", help="Show this help message"
    )
    options.add_argument(
        "-C",
        "--directory",
        type=Path,
        metavar="DIR",
        help="Run as if started in DIR instead of the current directory",
    )
    options.add_argument(
        "-v", "--verbose", action="store_true", help="Log every git invocation"
    )
    return parser


def setup_logging(verbose: bool) -> None:
    """Configures the logging subsystem.

    Args:
        verbose (bool): If True, log at DEBUG so each git call is shown.
    """
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
    )

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def run_command(command: Command, start: Path) -> None:
    """Locates the repository around `start` and runs the command sequence.

    Raises:
        RuntimeError: If any git step fails.
        ValueError: If `start` is not inside a git repository.
    """
    repo = GitRepo(find_repo_root(start))
    config = Config.load(repo.path)
    logger.debug(f"Running {command.value} in {repo.path}")
    OPERATIONS[command](repo, config)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the submodule-sync CLI."""
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args, extras = parser.parse_known_args(argv)
    setup_logging(args.verbose)

    name = args.command
    if name is None and extras:
        name = extras[0]
    elif extras:
        logger.debug(f"Ignoring extra arguments: {' '.join(extras)}")
    if name is None and "--" in argv:
        # argparse drops a bare separator; it is not a command name either.
        name = "--"

    command = Command.from_name(name)
    if command is not None and args.help:
        command = Command.HELP

    if command is None:
        console.print(f"Unknown command: {name}", markup=False, highlight=False)
        console.print()
        parser.print_help()
        sys.exit(1)

    if command is Command.HELP:
        parser.print_help()
        return

    try:
        run_command(command, args.directory or Path.cwd())
    except (RuntimeError, ValueError) as e:
        logger.debug(f"{command.value} aborted", exc_info=True)
        console.print(f"[bold red]ERROR:[/bold red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
