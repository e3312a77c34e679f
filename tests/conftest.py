# tests/conftest.py

"""Shared pytest fixtures for all noonsync tests."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from noonsync.config.settings import Settings


@pytest.fixture(autouse=True)
def isolated_output_dirs(tmp_path: Path) -> Generator[None, None, None]:
    """Point results/ and logs/ at a per-test temp dir."""
    with patch.object(Settings, "RESULTS_DIR", tmp_path / "results"), \
            patch.object(Settings, "LOGS_DIR", tmp_path / "logs"):
        yield
