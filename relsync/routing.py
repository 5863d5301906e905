"""Path routers and extract filters for release archive entries.

A router maps a root-stripped archive entry name to the path it should be
written to, relative to a target's destination directory. The empty string
means "do not write this entry for this target".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

REJECT = ""


@runtime_checkable
class PathRouter(Protocol):
    """Protocol for per-target routing policies."""

    def route(self, name: str) -> str:
        """Return the destination-relative path for ``name``, or ``REJECT``."""
        ...


@runtime_checkable
class ExtractFilter(Protocol):
    """Protocol for the coarse predicate applied before any routing."""

    def should_extract(self, name: str) -> bool: ...


@dataclass(frozen=True)
class KeepAllRouter:
    """Accept every name unchanged."""

    def route(self, name: str) -> str:
        return name


@dataclass(frozen=True)
class ExtensionRouter:
    """Accept names ending with ``ext`` (case-sensitive) and keep them as-is."""

    ext: str

    def route(self, name: str) -> str:
        if not name or not name.endswith(self.ext):
            return REJECT
        return name


@dataclass(frozen=True)
class SubdirRouter:
    """Accept names under ``subdir/`` and rebase them to that directory.

    ``agents/foo.md`` becomes ``foo.md`` for subdir ``agents``. ``agents`` on
    its own and ``agents-new/foo.md`` are rejected. When ``ext`` is set the
    rebased path must also end with it.
    """

    subdir: str
    ext: str = ""

    def route(self, name: str) -> str:
        prefix = self.subdir + "/"
        if not name.startswith(prefix):
            return REJECT
        rest = name[len(prefix) :]
        if not rest:
            return REJECT
        if self.ext and not rest.endswith(self.ext):
            return REJECT
        return rest


@dataclass(frozen=True)
class ExtractTarget:
    """One place extracted files land: a router plus its destination root."""

    router: PathRouter
    dest_dir: Path


@dataclass(frozen=True)
class AllFilesFilter:
    def should_extract(self, name: str) -> bool:
        return True


@dataclass(frozen=True)
class SuffixFilter:
    """Extract only names ending with ``suffix``."""

    suffix: str

    def should_extract(self, name: str) -> bool:
        return name.endswith(self.suffix)


def strip_root_dir(name: str) -> str:
    """Drop the archive's synthetic top-level directory from an entry name.

    ``repo-v1.0.0/agents/foo.md`` becomes ``agents/foo.md``. Names without a
    separator sit at the synthetic root and yield ``REJECT``.
    """
    _root, sep, rest = name.partition("/")
    if not sep:
        return REJECT
    return rest
