"""submodule-sync: Keep a parent git repository and its submodules in step.

This package provides the command-line interface and the git operations that
initialize submodules and move them onto their main or develop branches.
"""

from . import (
    cli,
    config,
    constants,
    git_wrapper,
    ops,
)

__all__ = [
    "cli",
    "config",
    "constants",
    "git_wrapper",
    "ops",
]
