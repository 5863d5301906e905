"""Keep local directories in sync with a GitHub repository's latest release."""

from relsync.config import ResolvedConfig, Settings, UpdaterConfig
from relsync.exceptions import (
    ArchiveError,
    ArchiveErrorKind,
    ConfigError,
    RelsyncError,
    ReleaseClientError,
    ReleaseTimeoutError,
    SyncError,
    SyncStage,
)
from relsync.filesystem.archive_extractor import ExtractionReport, extract_archive
from relsync.filesystem.metadata_store import MetadataRecord, MetadataStore
from relsync.routing import (
    AllFilesFilter,
    ExtensionRouter,
    ExtractFilter,
    ExtractTarget,
    KeepAllRouter,
    PathRouter,
    SubdirRouter,
    SuffixFilter,
)
from relsync.services.release_client import GitHubReleaseClient, ReleaseClient, ReleaseInfo
from relsync.services.updater import SyncResult, Updater

__all__ = [
    "AllFilesFilter",
    "ArchiveError",
    "ArchiveErrorKind",
    "ConfigError",
    "ExtensionRouter",
    "ExtractFilter",
    "ExtractTarget",
    "ExtractionReport",
    "GitHubReleaseClient",
    "KeepAllRouter",
    "MetadataRecord",
    "MetadataStore",
    "PathRouter",
    "RelsyncError",
    "ReleaseClient",
    "ReleaseClientError",
    "ReleaseInfo",
    "ReleaseTimeoutError",
    "ResolvedConfig",
    "Settings",
    "SubdirRouter",
    "SuffixFilter",
    "SyncError",
    "SyncResult",
    "SyncStage",
    "Updater",
    "extract_archive",
]
