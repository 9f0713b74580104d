import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest


@pytest.fixture(autouse=True)
def reset_logger() -> Iterator[None]:
    """Detaches handlers installed by the CLI so they never outlive a test."""
    logger = logging.getLogger("submodule-sync")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def isolated_global_config(tmp_path: Path, mocker: MagicMock) -> Path:
    """Keeps the user's real global config out of every test."""
    path = tmp_path / "global" / "config.toml"
    mocker.patch("submodule_sync.config.CONFIG_FILE", path)
    return path
