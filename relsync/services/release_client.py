"""GitHub Releases API client: release lookup and zipball download."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from relsync.exceptions import ReleaseClientError, ReleaseTimeoutError

if TYPE_CHECKING:
    from relsync.config import Settings

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True)
class ReleaseInfo:
    """The parts of a release the updater needs."""

    tag_name: str | None
    zipball_url: str | None


@runtime_checkable
class ReleaseClient(Protocol):
    """Protocol for the remote side of a synchronization run."""

    def latest_release(self, owner: str, repo: str, *, timeout: float) -> ReleaseInfo:
        """Return the latest published release of ``owner/repo``."""
        ...

    def release_by_tag(self, owner: str, repo: str, tag: str, *, timeout: float) -> ReleaseInfo:
        """Return the release tagged ``tag``."""
        ...

    def download_archive(self, url: str, *, timeout: float) -> bytes:
        """Fetch the archive at ``url`` in full."""
        ...


def _release_from_json(data: Any) -> ReleaseInfo:
    if not isinstance(data, dict):
        raise ReleaseClientError("unexpected release payload: not a JSON object")
    tag_name = data.get("tag_name")
    zipball_url = data.get("zipball_url")
    return ReleaseInfo(
        tag_name=tag_name if isinstance(tag_name, str) and tag_name else None,
        zipball_url=zipball_url if isinstance(zipball_url, str) and zipball_url else None,
    )


class GitHubReleaseClient:
    """Synchronous GitHub REST client for release metadata and zipballs."""

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        token: str = "",
        user_agent: str = "relsync",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self._api_headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.Client(
            base_url=self.api_url,
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> GitHubReleaseClient:
        return cls(
            api_url=settings.api_url,
            token=settings.github_token,
            user_agent=settings.user_agent,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> GitHubReleaseClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _fetch(self, url: str, timeout: float, headers: dict[str, str] | None = None) -> bytes:
        """GET ``url`` and return the body.

        ``timeout`` bounds each network operation and the request as a whole.
        """
        deadline = time.monotonic() + timeout
        chunks: list[bytes] = []
        try:
            with self.client.stream("GET", url, headers=headers, timeout=timeout) as resp:
                if resp.status_code != httpx.codes.OK:
                    raise ReleaseClientError(
                        f"HTTP {resp.status_code}: GET {url}", status_code=resp.status_code
                    )
                for chunk in resp.iter_bytes():
                    if time.monotonic() > deadline:
                        raise ReleaseTimeoutError(f"GET {url} exceeded {timeout}s")
                    chunks.append(chunk)
        except httpx.TimeoutException as exc:
            raise ReleaseTimeoutError(f"timed out after {timeout}s: GET {url}") from exc
        except httpx.HTTPError as exc:
            raise ReleaseClientError(f"request failed: GET {url}: {exc}") from exc
        return b"".join(chunks)

    def _get_release(self, path: str, timeout: float) -> ReleaseInfo:
        body = self._fetch(path, timeout, headers=self._api_headers)
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise ReleaseClientError(f"invalid JSON from GET {path}") from exc
        return _release_from_json(data)

    def latest_release(self, owner: str, repo: str, *, timeout: float) -> ReleaseInfo:
        return self._get_release(f"/repos/{quote(owner)}/{quote(repo)}/releases/latest", timeout)

    def release_by_tag(self, owner: str, repo: str, tag: str, *, timeout: float) -> ReleaseInfo:
        path = f"/repos/{quote(owner)}/{quote(repo)}/releases/tags/{quote(tag, safe='')}"
        return self._get_release(path, timeout)

    def download_archive(self, url: str, *, timeout: float) -> bytes:
        """Download ``url`` without API credentials."""
        data = self._fetch(url, timeout)
        logger.debug("Downloaded %d bytes from %s", len(data), url)
        return data
