import os
from pathlib import Path

"""Global constants and configuration path definitions for submodule-sync.

This module defines the application identifiers, the configuration file layout
(adhering to XDG standards where applicable), and the default remote and branch
names used when no configuration overrides them.
"""

# --- Identity ---
APP_NAME = "submodule-sync"
"""str: The human-readable application name, also used as the logger name."""

LOCAL_CONFIG_NAME = "submodule-sync.toml"
"""str: Repository-local configuration file name."""

PYPROJECT_SECTION = "tool.submodule-sync"
"""str: The pyproject.toml table consulted when no local config file exists."""

# --- Configuration Paths ---
_XDG_CONFIG = os.environ.get("XDG_CONFIG_HOME")
_BASE_CONFIG = Path(_XDG_CONFIG) if _XDG_CONFIG else Path.home() / ".config"

CONFIG_DIR: Path = _BASE_CONFIG / "submodule-sync"
"""Path: The directory for user configuration files."""

CONFIG_FILE: Path = CONFIG_DIR / "config.toml"
"""Path: The global configuration file path."""

# --- Git Defaults ---
DEFAULT_REMOTE = "origin"
"""str: The remote pulled from, in the parent and in every submodule."""

DEFAULT_PARENT_BRANCH = "main"
"""str: The branch pulled in the parent repository before touching submodules."""

DEFAULT_MAIN_BRANCHES = ["main", "master"]
"""list[str]: Checkout candidates for `update-main`, tried in order."""

DEFAULT_DEVELOP_BRANCH = "develop"
"""str: The checkout and pull target for `update-develop`."""
