import logging
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .constants import (
    APP_NAME,
    CONFIG_FILE,
    DEFAULT_DEVELOP_BRANCH,
    DEFAULT_MAIN_BRANCHES,
    DEFAULT_PARENT_BRANCH,
    DEFAULT_REMOTE,
    LOCAL_CONFIG_NAME,
    PYPROJECT_SECTION,
)

logger = logging.getLogger(APP_NAME)


def parse_branch_list(value: str | list[str]) -> list[str]:
    """Normalizes a branch candidate setting into a non-empty list of names."""
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Expected a branch name or list of names, got {value!r}")
    branches = [v.strip() for v in value if v.strip()]
    if not branches:
        raise ValueError("At least one branch name is required")
    return branches


def parse_name(value: Any) -> str:
    """Validates a single remote or branch name."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Expected a non-empty string, got {value!r}")
    return value.strip()


@dataclass
class CoreConfig:
    """Parent repository settings.

    Attributes:
        remote_name (str): The git remote pulled from.
        parent_branch (str): The branch pulled in the parent repository.
    """

    remote_name: str = DEFAULT_REMOTE
    parent_branch: str = DEFAULT_PARENT_BRANCH


@dataclass
class BranchesConfig:
    """Submodule branch targets.

    Attributes:
        main (list[str]): Checkout candidates for `update-main`, first match wins.
        develop (str): Checkout and pull target for `update-develop`.
    """

    main: list[str] = field(default_factory=lambda: list(DEFAULT_MAIN_BRANCHES))
    develop: str = DEFAULT_DEVELOP_BRANCH


@dataclass
class Config:
    """Global configuration aggregator.

    Attributes:
        core (CoreConfig): Parent repository settings.
        branches (BranchesConfig): Submodule branch targets.
    """

    core: CoreConfig = field(default_factory=CoreConfig)
    branches: BranchesConfig = field(default_factory=BranchesConfig)

    @classmethod
    def load(cls, repo_path: Path | None = None) -> "Config":
        """Loads and merges configuration from defaults, global, and local sources.

        Args:
            repo_path (Path | None): The repository root to search for local config.

        Returns:
            Config: The fully merged configuration object.
        """
        instance = cls()
        if CONFIG_FILE.exists():
            instance._merge_from_file(CONFIG_FILE)

        if repo_path:
            local_toml = repo_path / LOCAL_CONFIG_NAME
            pyproject = repo_path / "pyproject.toml"

            if local_toml.exists():
                instance._merge_from_file(local_toml)
            elif pyproject.exists():
                instance._merge_from_file(pyproject, section=PYPROJECT_SECTION)

        return instance

    def _merge_from_file(self, path: Path, section: str | None = None) -> None:
        """Parses a TOML file and merges it into the current instance.

        Args:
            path (Path): Path to the TOML file.
            section (str | None): Dot-separated section path (e.g., 'tool.submodule-sync').
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)

            if section:
                for key in section.split("."):
                    data = data.get(key, {})

            if not data:
                return

            if "core" in data:
                self.core = self._update_dataclass("core", self.core, data["core"])
            if "branches" in data:
                self.branches = self._update_dataclass(
                    "branches", self.branches, data["branches"]
                )

        except tomllib.TOMLDecodeError as e:
            logger.error(f"Config syntax error in {path}: {e}")
        except Exception as e:
            logger.warning(f"Failed to load config from {path}: {e}")

    @staticmethod
    def _update_dataclass(section_name: str, instance: Any, updates: dict) -> Any:
        """Updates a dataclass, warning on invalid keys and rejecting bad values."""
        valid_keys = instance.__dataclass_fields__.keys()
        filtered_updates = {}

        invalid_keys = set(updates.keys()) - set(valid_keys)
        if invalid_keys:
            logger.warning(
                f"Unknown config keys in [{section_name}]: "
                f"{', '.join(sorted(invalid_keys))}. Ignoring."
            )

        for k, v in updates.items():
            if k not in valid_keys:
                continue

            try:
                if section_name == "branches" and k == "main":
                    filtered_updates[k] = parse_branch_list(v)
                else:
                    filtered_updates[k] = parse_name(v)
            except ValueError as e:
                logger.warning(
                    f"Config error in [{section_name}].{k}: {e}. Falling back to default."
                )

        return replace(instance, **filtered_updates)
