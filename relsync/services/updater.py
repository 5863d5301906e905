"""Release synchronization: keep target directories at the latest release."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from relsync.config import Settings
from relsync.exceptions import (
    ArchiveError,
    ReleaseClientError,
    SyncError,
    SyncStage,
)
from relsync.filesystem.archive_extractor import ExtractionReport, extract_archive
from relsync.filesystem.metadata_store import MetadataStore
from relsync.services.release_client import GitHubReleaseClient

if TYPE_CHECKING:
    from relsync.config import ResolvedConfig, UpdaterConfig
    from relsync.services.release_client import ReleaseClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one ``Updater.update()`` call."""

    version: str
    previous_version: str
    downloaded: bool
    report: ExtractionReport | None = None
    metadata_saved: bool = True


class Updater:
    """Synchronizes configured target directories with a repository's latest release.

    Each ``update()`` runs one remote check and at most one download, in order:
    latest tag lookup, comparison with the recorded tag, download, extraction,
    metadata write. The metadata record only changes once extraction has
    completed, so a failed run is retried from the same starting point.
    """

    def __init__(
        self,
        config: UpdaterConfig,
        client: ReleaseClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or Settings()
        self.config: ResolvedConfig = config.resolve(settings)
        self.store = MetadataStore(self.config.metadata_file)
        self._owns_client = client is None
        self.client: ReleaseClient = client or GitHubReleaseClient.from_settings(settings)

    def close(self) -> None:
        """Close the release client if this updater created it."""
        if self._owns_client and isinstance(self.client, GitHubReleaseClient):
            self.client.close()

    def __enter__(self) -> Updater:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def _repo(self) -> str:
        return f"{self.config.repo_owner}/{self.config.repo_name}"

    def update(self, *, force: bool = False) -> SyncResult:
        """Bring every target up to date with the latest release.

        Raises SyncError if the remote check, the download or the extraction
        fails. A failure to write the metadata record afterwards is logged and
        reported through ``SyncResult.metadata_saved`` instead.
        """
        latest_version = self.latest_version()
        local_version = self.store.read_version()

        if not force and latest_version == local_version and not self.needs_redownload():
            logger.info("%s is up to date at %s", self._repo, local_version)
            saved = self._save_version(local_version)
            return SyncResult(
                version=local_version,
                previous_version=local_version,
                downloaded=False,
                metadata_saved=saved,
            )

        logger.info(
            "Syncing %s: local %s, latest %s",
            self._repo,
            local_version or "<none>",
            latest_version,
        )
        data = self._download(latest_version)
        report = self._extract(data)
        logger.info(
            "Extracted %d file(s) from %s %s (%d entries skipped)",
            report.files_written,
            self._repo,
            latest_version,
            report.skipped,
        )

        saved = self._save_version(latest_version)
        return SyncResult(
            version=latest_version,
            previous_version=local_version,
            downloaded=True,
            report=report,
            metadata_saved=saved,
        )

    def latest_version(self) -> str:
        """Return the latest release tag of the configured repository."""
        try:
            release = self.client.latest_release(
                self.config.repo_owner,
                self.config.repo_name,
                timeout=self.config.request_timeout,
            )
        except ReleaseClientError as exc:
            raise SyncError(
                SyncStage.REMOTE_UNAVAILABLE,
                f"failed to get latest release of {self._repo}: {exc}",
            ) from exc

        if not release.tag_name:
            raise SyncError(
                SyncStage.REMOTE_UNAVAILABLE,
                f"latest release of {self._repo} has no tag name",
            )
        return release.tag_name

    def needs_redownload(self) -> bool:
        """Return True if any target directory is missing, unreadable or empty."""
        for target in self.config.targets:
            try:
                with os.scandir(target.dest_dir) as entries:
                    if next(entries, None) is None:
                        logger.info("Target directory %s is empty", target.dest_dir)
                        return True
            except OSError as exc:
                logger.info("Target directory %s is unusable: %s", target.dest_dir, exc)
                return True
        return False

    def _download(self, version: str) -> bytes:
        deadline = time.monotonic() + self.config.download_timeout
        try:
            release = self.client.release_by_tag(
                self.config.repo_owner,
                self.config.repo_name,
                version,
                timeout=self.config.download_timeout,
            )
            if not release.zipball_url:
                raise SyncError(
                    SyncStage.DOWNLOAD_FAILED,
                    f"release {version} of {self._repo} has no zipball URL",
                )
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise SyncError(
                    SyncStage.DOWNLOAD_FAILED,
                    f"timed out before downloading {version} of {self._repo}",
                )
            logger.info("Downloading %s", release.zipball_url)
            return self.client.download_archive(release.zipball_url, timeout=remaining)
        except ReleaseClientError as exc:
            raise SyncError(
                SyncStage.DOWNLOAD_FAILED,
                f"failed to download {version} of {self._repo}: {exc}",
            ) from exc

    def _extract(self, data: bytes) -> ExtractionReport:
        try:
            return extract_archive(
                data,
                self.config.targets,
                extract_filter=self.config.extract_filter,
                require_absolute=self.config.require_absolute_paths,
            )
        except ArchiveError as exc:
            raise SyncError(
                SyncStage.EXTRACT_FAILED,
                f"failed to extract {self._repo} archive ({exc.kind}): {exc}",
            ) from exc

    def _save_version(self, version: str) -> bool:
        try:
            self.store.write(version)
        except OSError as exc:
            logger.error(
                "Failed to record release %s in %s: %s",
                version,
                self.store.path,
                exc,
            )
            return False
        return True
