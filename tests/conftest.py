"""Shared test fixtures for relsync."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from relsync.config import Settings

if TYPE_CHECKING:
    from pathlib import Path

_ENV_VARS = (
    "GITHUB_TOKEN",
    "RELSYNC_GITHUB_TOKEN",
    "RELSYNC_API_URL",
    "RELSYNC_REQUEST_TIMEOUT",
    "RELSYNC_DOWNLOAD_TIMEOUT",
    "RELSYNC_METADATA_DIR",
    "RELSYNC_METADATA_FILENAME",
    "RELSYNC_USER_AGENT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of the settings under test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(_env_file=None, metadata_dir=tmp_path / "state")
