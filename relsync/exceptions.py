"""Exception types raised by relsync.

Convention:
- ``ConfigError`` is raised while building an updater, before any I/O happens.
- ``ArchiveError`` is raised by the extractor; ``kind`` tells malformed input
  apart from local filesystem failures and rejected destination paths.
- ``SyncError`` is what ``Updater.update()`` raises. ``stage`` names the step
  that failed and the underlying exception is chained as ``__cause__``.
"""

from __future__ import annotations

from enum import StrEnum


class RelsyncError(Exception):
    """Base class for every error raised by relsync."""


class ConfigError(RelsyncError, ValueError):
    """Raised for invalid updater configuration (empty repo, no targets, ...)."""


class ArchiveErrorKind(StrEnum):
    MALFORMED = "malformed"
    IO_FAILURE = "io_failure"
    INVALID_PATH = "invalid_path"


class ArchiveError(RelsyncError):
    """Raised when a release archive cannot be extracted."""

    def __init__(self, kind: ArchiveErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class SyncStage(StrEnum):
    REMOTE_UNAVAILABLE = "remote_unavailable"
    DOWNLOAD_FAILED = "download_failed"
    EXTRACT_FAILED = "extract_failed"


class SyncError(RelsyncError):
    """Raised when a synchronization run aborts."""

    def __init__(self, stage: SyncStage, message: str) -> None:
        super().__init__(f"{stage.value}: {message}")
        self.stage = stage


class ReleaseClientError(RelsyncError):
    """Raised by a release client on transport or API failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ReleaseTimeoutError(ReleaseClientError):
    """Raised when a release API call or archive download exceeds its timeout."""
