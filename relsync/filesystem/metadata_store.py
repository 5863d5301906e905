"""JSON record of the last synchronized release."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from relsync.services.datetime_service import format_rfc3339, now_utc, parse_datetime

if TYPE_CHECKING:
    from datetime import datetime
    from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetadataRecord:
    version: str
    last_check_at: str


class MetadataStore:
    """Reads and writes the ``{version, last_check_at}`` record.

    A missing, unreadable or malformed file is treated as "no known version";
    reads never raise.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> MetadataRecord | None:
        """Return the stored record, or None if there is no usable one."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read release metadata %s: %s", self.path, exc)
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring malformed release metadata %s: %s", self.path, exc)
            return None

        if not isinstance(data, dict):
            logger.warning("Ignoring release metadata %s: not a JSON object", self.path)
            return None
        version = data.get("version", "")
        last_check_at = data.get("last_check_at", "")
        if not isinstance(version, str) or not isinstance(last_check_at, str):
            logger.warning("Ignoring release metadata %s: unexpected field types", self.path)
            return None
        return MetadataRecord(version=version, last_check_at=last_check_at)

    def read_version(self) -> str:
        """Return the recorded release tag, or "" when none is known."""
        record = self.read()
        return record.version if record is not None else ""

    def last_checked_at(self) -> datetime | None:
        """Return the time of the last completed check, if it can be parsed."""
        record = self.read()
        if record is None or not record.last_check_at:
            return None
        try:
            return parse_datetime(record.last_check_at)
        except ValueError:
            logger.warning("Unparseable last_check_at %r in %s", record.last_check_at, self.path)
            return None

    def write(self, version: str, checked_at: datetime | None = None) -> MetadataRecord:
        """Record ``version`` as current, stamped with ``checked_at`` (default: now).

        Raises OSError if the file cannot be written.
        """
        record = MetadataRecord(
            version=version,
            last_check_at=format_rfc3339(checked_at or now_utc()),
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(asdict(record), indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise
        return record
