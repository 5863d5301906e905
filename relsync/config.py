"""Settings loaded from the environment and per-updater configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from relsync.exceptions import ConfigError
from relsync.routing import AllFilesFilter, ExtractTarget

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relsync.routing import ExtractFilter

DEFAULT_REQUEST_TIMEOUT = 3.0
DEFAULT_DOWNLOAD_TIMEOUT = 30.0
DEFAULT_METADATA_FILENAME = "release.json"


class Settings(BaseSettings):
    """relsync settings, read from ``RELSYNC_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RELSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # GitHub API
    api_url: str = "https://api.github.com"
    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("RELSYNC_GITHUB_TOKEN", "GITHUB_TOKEN"),
    )
    user_agent: str = "relsync"

    # Timeouts (seconds)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)
    download_timeout: float = Field(default=DEFAULT_DOWNLOAD_TIMEOUT, gt=0)

    # Metadata record
    metadata_dir: Path = Field(default_factory=lambda: Path.home() / ".relsync")
    metadata_filename: str = Field(default=DEFAULT_METADATA_FILENAME, min_length=1)

    def default_metadata_file(self, owner: str, repo: str) -> Path:
        """Return the metadata location used when an updater does not set one."""
        return self.metadata_dir / owner / repo / self.metadata_filename


@dataclass(frozen=True)
class UpdaterConfig:
    """Configuration of one updater.

    Fields left as None are filled in by ``resolve()``.
    """

    repo_owner: str
    repo_name: str
    targets: Sequence[ExtractTarget] = ()
    metadata_file: Path | None = None
    request_timeout: float | None = None
    download_timeout: float | None = None
    extract_filter: ExtractFilter | None = None
    require_absolute_paths: bool = True

    def resolve(self, settings: Settings | None = None) -> ResolvedConfig:
        """Validate this config and return a copy with every default filled in.

        Raises ConfigError on the first invalid field.
        """
        if not self.repo_owner:
            raise ConfigError("repo owner cannot be empty")
        if not self.repo_name:
            raise ConfigError("repo name cannot be empty")
        if not self.targets:
            raise ConfigError("targets cannot be empty")

        targets: list[ExtractTarget] = []
        for i, target in enumerate(self.targets):
            if target.router is None:
                raise ConfigError(f"targets[{i}].router cannot be None")
            if target.dest_dir is None or os.fspath(target.dest_dir) in ("", "."):
                raise ConfigError(f"targets[{i}].dest_dir cannot be empty")
            targets.append(ExtractTarget(router=target.router, dest_dir=Path(target.dest_dir)))

        for name in ("request_timeout", "download_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")

        settings = settings or Settings()
        metadata_file = self.metadata_file
        if metadata_file is None or os.fspath(metadata_file) in ("", "."):
            metadata_file = settings.default_metadata_file(self.repo_owner, self.repo_name)

        return ResolvedConfig(
            repo_owner=self.repo_owner,
            repo_name=self.repo_name,
            targets=tuple(targets),
            metadata_file=Path(metadata_file),
            request_timeout=self.request_timeout or settings.request_timeout,
            download_timeout=self.download_timeout or settings.download_timeout,
            extract_filter=self.extract_filter or AllFilesFilter(),
            require_absolute_paths=self.require_absolute_paths,
        )


@dataclass(frozen=True)
class ResolvedConfig:
    """An ``UpdaterConfig`` after validation, with every default filled in."""

    repo_owner: str
    repo_name: str
    targets: tuple[ExtractTarget, ...]
    metadata_file: Path
    request_timeout: float
    download_timeout: float
    extract_filter: ExtractFilter
    require_absolute_paths: bool
