"""Tests for the release metadata record."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import pytest

from relsync.filesystem.metadata_store import MetadataRecord, MetadataStore

if TYPE_CHECKING:
    from pathlib import Path


class TestReadVersion:
    def test_missing_file_returns_empty(self, tmp_path: Path) -> None:
        store = MetadataStore(tmp_path / "not_exists.json")
        assert store.read_version() == ""
        assert store.read() is None

    def test_valid_record(self, tmp_path: Path) -> None:
        path = tmp_path / "valid.json"
        path.write_text(json.dumps({"version": "v1.0.0", "last_check_at": "2024-01-01T00:00:00Z"}))
        store = MetadataStore(path)
        assert store.read_version() == "v1.0.0"
        assert store.read() == MetadataRecord("v1.0.0", "2024-01-01T00:00:00Z")

    def test_invalid_json_returns_empty(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "invalid.json"
        path.write_text("not json")
        with caplog.at_level(logging.WARNING, logger="relsync.filesystem.metadata_store"):
            assert MetadataStore(path).read_version() == ""
        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_empty_version(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"version": "", "last_check_at": "2024-01-01T00:00:00Z"}))
        assert MetadataStore(path).read_version() == ""

    @pytest.mark.parametrize(
        "payload",
        ['["v1.0.0"]', '"v1.0.0"', '{"version": 3}', '{"version": null}'],
    )
    def test_wrong_shape_returns_empty(self, tmp_path: Path, payload: str) -> None:
        path = tmp_path / "shape.json"
        path.write_text(payload)
        assert MetadataStore(path).read_version() == ""

    def test_binary_garbage_returns_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "garbage.json"
        path.write_bytes(b"\xff\xfe\x00\x81")
        assert MetadataStore(path).read_version() == ""

    def test_directory_in_place_of_file_returns_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "dir.json"
        path.mkdir()
        assert MetadataStore(path).read_version() == ""


class TestWrite:
    def test_write_then_read_roundtrip(self, tmp_path: Path) -> None:
        store = MetadataStore(tmp_path / "new.json")
        record = store.write("v1.0.0")
        assert store.read_version() == "v1.0.0"
        assert record.last_check_at
        assert store.read() == record

    def test_write_creates_nested_dirs(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "dir" / "metadata.json"
        MetadataStore(path).write("v2.0.0")
        assert json.loads(path.read_text())["version"] == "v2.0.0"

    def test_file_format(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        checked = datetime(2026, 3, 4, 5, 6, 7, tzinfo=timezone.utc)
        MetadataStore(path).write("v3.1.0", checked_at=checked)
        assert path.read_text() == (
            '{\n  "version": "v3.1.0",\n  "last_check_at": "2026-03-04T05:06:07+00:00"\n}'
        )
        assert not (tmp_path / "release.json.tmp").exists()

    def test_write_overwrites_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.write_text("{{{")
        store = MetadataStore(path)
        store.write("v1.1.0")
        assert store.read_version() == "v1.1.0"

    def test_write_raises_when_parent_is_a_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(OSError):
            MetadataStore(blocker / "release.json").write("v1.0.0")

    def test_failed_replace_leaves_no_temp_file(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.mkdir()

        with pytest.raises(OSError):
            MetadataStore(path).write("v1.0.0")

        assert path.is_dir()
        assert not (tmp_path / "release.json.tmp").exists()


class TestLastCheckedAt:
    def test_parses_recorded_timestamp(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        path.write_text(json.dumps({"version": "v1", "last_check_at": "2024-01-01T12:30:00Z"}))
        checked = MetadataStore(path).last_checked_at()
        assert checked is not None
        assert (checked.year, checked.month, checked.day, checked.hour) == (2024, 1, 1, 12)

    def test_missing_or_unparseable_returns_none(self, tmp_path: Path) -> None:
        path = tmp_path / "release.json"
        assert MetadataStore(path).last_checked_at() is None
        path.write_text(json.dumps({"version": "v1", "last_check_at": "yesterday-ish"}))
        assert MetadataStore(path).last_checked_at() is None
