"""Selective extraction of release zipballs into target directories."""

from __future__ import annotations

import io
import logging
import os
import shutil
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from relsync.exceptions import ArchiveError, ArchiveErrorKind
from relsync.routing import AllFilesFilter, strip_root_dir

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relsync.routing import ExtractFilter, ExtractTarget

logger = logging.getLogger(__name__)

# General purpose bit 0 of a zip entry header
_ENCRYPTED_FLAG = 0x1


@dataclass
class ExtractionReport:
    """Outcome of one extraction pass."""

    written: list[Path] = field(default_factory=list)
    skipped: int = 0

    @property
    def files_written(self) -> int:
        return len(self.written)


def resolve_destination(dest_dir: Path, routed: str, *, require_absolute: bool = True) -> Path:
    """Join a routed path onto its destination root.

    Raises ArchiveError(INVALID_PATH) when the result is relative while
    ``require_absolute`` is set, or when it would land outside ``dest_dir``.
    """
    root = Path(os.path.normpath(dest_dir))
    dest = Path(os.path.normpath(root / routed))
    if require_absolute and not dest.is_absolute():
        raise ArchiveError(
            ArchiveErrorKind.INVALID_PATH,
            f"destination path must be absolute: {dest}",
        )
    if dest == root or not dest.is_relative_to(root):
        raise ArchiveError(
            ArchiveErrorKind.INVALID_PATH,
            f"destination path {dest} escapes target directory {root}",
        )
    return dest


def _write_member(archive: zipfile.ZipFile, info: zipfile.ZipInfo, dest: Path) -> None:
    if info.flag_bits & _ENCRYPTED_FLAG:
        raise ArchiveError(
            ArchiveErrorKind.MALFORMED,
            f"encrypted archive member {info.filename} is not supported",
        )
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        with archive.open(info) as src, open(dest, "wb") as dst:
            shutil.copyfileobj(src, dst)
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as exc:
        raise ArchiveError(
            ArchiveErrorKind.MALFORMED,
            f"corrupt archive member {info.filename}: {exc}",
        ) from exc
    except OSError as exc:
        raise ArchiveError(
            ArchiveErrorKind.IO_FAILURE,
            f"failed to write {dest}: {exc}",
        ) from exc


def extract_archive(
    data: bytes,
    targets: Sequence[ExtractTarget],
    *,
    extract_filter: ExtractFilter | None = None,
    require_absolute: bool = True,
) -> ExtractionReport:
    """Extract the entries of a release zipball that the targets accept.

    Entries are visited in archive order. Each entry's synthetic top-level
    directory is stripped, the result goes through ``extract_filter`` and then
    through every target's router; an entry accepted by several targets is
    written once per target. Later entries overwrite earlier ones at the same
    destination. Nothing is rolled back if a write fails midway.
    """
    extract_filter = extract_filter or AllFilesFilter()
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise ArchiveError(ArchiveErrorKind.MALFORMED, f"not a zip archive: {exc}") from exc

    report = ExtractionReport()
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue

            rel_path = strip_root_dir(info.filename)
            if not rel_path or not extract_filter.should_extract(rel_path):
                report.skipped += 1
                continue

            accepted = False
            for target in targets:
                routed = target.router.route(rel_path)
                if not routed:
                    continue
                dest = resolve_destination(
                    target.dest_dir, routed, require_absolute=require_absolute
                )
                _write_member(archive, info, dest)
                report.written.append(dest)
                accepted = True
                logger.debug("Extracted %s -> %s", info.filename, dest)

            if not accepted:
                report.skipped += 1
                logger.debug("Skipped %s: no target accepted it", info.filename)

    return report
