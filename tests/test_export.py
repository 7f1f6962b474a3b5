from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from geo_logger.errors import ExportError, NothingToExport, PermissionDenied
from geo_logger.export import export_filename, export_history, format_value, render_entry, render_history
from geo_logger.history import SessionHistory
from tests.conftest import FakePermissions, RecordingFileSystem, RecordingMediaLibrary, StepClock, make_entry

EXPECTED_FILENAME = "geolocation_2025-12-18T01-30-00.123Z.txt"


def _history(*entries) -> SessionHistory:
    h = SessionHistory()
    for e in entries:
        h.append(e)
    return h


def test_format_value():
    assert format_value(None) == "null"
    assert format_value(37.0) == "37"
    assert format_value(-122.0841) == "-122.0841"
    assert format_value(30.7456421) == "30.7456421"
    assert format_value(0.1 + 0.2) == "0.30000000000000004"


def test_render_entry_block():
    entry = make_entry(timestamp="2025-12-18T01:30:00.000Z")
    assert render_entry(1, entry) == (
        "Location #1 (2025-12-18T01:30:00.000Z):\n"
        "Latitude: 30.7456421\n"
        "Longitude: 103.9284974\n"
        "Altitude: 512.3\n"
        "Accuracy: 8.5 meters\n"
        "Speed: 1.25\n"
        "Heading: 90.5\n"
        "------------------------------\n"
    )


def test_render_history_two_blocks_in_order_with_nulls():
    e1 = make_entry(lat=10.123456789, lon=20.5, timestamp="2025-12-18T01:30:00.000Z")
    e2 = make_entry(
        lat=11.0,
        lon=21.25,
        timestamp="2025-12-18T01:31:00.000Z",
        altitude=None,
        speed=None,
        heading=None,
    )
    text = render_history([e1, e2])

    blocks = text.split("\n\n")
    assert len(blocks) == 2
    assert blocks[0].startswith("Location #1 (2025-12-18T01:30:00.000Z):\nLatitude: 10.123456789\n")
    assert blocks[1].startswith("Location #2 (2025-12-18T01:31:00.000Z):\nLatitude: 11\nLongitude: 21.25\n")
    assert "Altitude: null\n" in blocks[1]
    assert "Speed: null\n" in blocks[1]
    assert "Heading: null\n" in blocks[1]
    assert "Altitude: 512.3\n" in blocks[0]
    assert text.count("------------------------------") == 2


def test_export_filename_has_no_colons_and_differs_per_instant():
    a = export_filename(datetime(2025, 12, 18, 1, 30, 0, 123000, tzinfo=UTC))
    b = export_filename(datetime(2025, 12, 18, 1, 30, 0, 124000, tzinfo=UTC))
    assert a == EXPECTED_FILENAME
    assert ":" not in a and ":" not in b
    assert a != b


@pytest.mark.asyncio
async def test_empty_history_makes_no_service_calls(permissions, files, media):
    with pytest.raises(NothingToExport):
        await export_history(SessionHistory(), permissions, files, media)
    assert permissions.calls == []
    assert files.writes == []
    assert media.calls == []


@pytest.mark.asyncio
async def test_media_permission_denied_writes_nothing(files, media):
    permissions = FakePermissions(media=False)
    with pytest.raises(PermissionDenied) as info:
        await export_history(_history(make_entry()), permissions, files, media)
    assert info.value.kind == "media"
    assert files.writes == []
    assert media.calls == []
    assert not files.document_directory.exists()


@pytest.mark.asyncio
async def test_export_creates_album_with_only_new_asset(permissions, files, media):
    history = _history(make_entry(lat=1.0), make_entry(lat=2.0))
    result = await export_history(history, permissions, files, media, clock=StepClock())

    assert result.path == files.document_directory / EXPECTED_FILENAME
    assert result.created_album is True
    assert result.entries == 2
    assert media.calls == ["create_asset", "get_album", "create_album"]
    assert media.album_assets(result.album) == [EXPECTED_FILENAME]
    assert [p.name for p in (media.root).iterdir() if p.is_dir() and p.name != ".assets"] == ["Download"]

    text = result.path.read_text(encoding="utf-8")
    assert text == render_history(history.iterate())
    assert "Latitude: 1\n" in text and "Latitude: 2\n" in text


@pytest.mark.asyncio
async def test_export_into_existing_album_keeps_prior_assets(permissions, files, media):
    album_dir = media.root / "Download"
    album_dir.mkdir(parents=True)
    (album_dir / "old.txt").write_text("keep me", encoding="utf-8")

    result = await export_history(_history(make_entry()), permissions, files, media, clock=StepClock())

    assert result.created_album is False
    assert media.calls == ["create_asset", "get_album", "add_assets_to_album"]
    assert media.album_assets(result.album) == [EXPECTED_FILENAME, "old.txt"]
    assert (album_dir / "old.txt").read_text(encoding="utf-8") == "keep me"


@pytest.mark.asyncio
async def test_custom_album_name(permissions, files, media):
    result = await export_history(_history(make_entry()), permissions, files, media, album_name="Tracks")
    assert result.album.title == "Tracks"
    assert (media.root / "Tracks").is_dir()


@pytest.mark.asyncio
async def test_write_failure_is_export_error(tmp_path: Path, permissions, media):
    files = RecordingFileSystem(tmp_path / "documents", fail=PermissionError("read-only filesystem"))
    with pytest.raises(ExportError, match="read-only filesystem"):
        await export_history(_history(make_entry()), permissions, files, media)
    assert media.calls == []


@pytest.mark.asyncio
async def test_asset_failure_leaves_orphaned_file(tmp_path: Path, permissions, files):
    media = RecordingMediaLibrary(tmp_path / "media", fail_on="create_asset")
    with pytest.raises(ExportError, match="create_asset failed"):
        await export_history(_history(make_entry()), permissions, files, media, clock=StepClock())
    assert (files.document_directory / EXPECTED_FILENAME).exists()
    assert files.deletes == []


@pytest.mark.asyncio
async def test_asset_failure_with_cleanup_removes_file(tmp_path: Path, permissions, files):
    media = RecordingMediaLibrary(tmp_path / "media", fail_on="create_asset")
    with pytest.raises(ExportError):
        await export_history(
            _history(make_entry()), permissions, files, media, clock=StepClock(), cleanup_on_failure=True
        )
    assert not (files.document_directory / EXPECTED_FILENAME).exists()
    assert files.deletes == [files.document_directory / EXPECTED_FILENAME]


@pytest.mark.asyncio
async def test_album_failure_stops_without_retry(tmp_path: Path, permissions, files):
    media = RecordingMediaLibrary(tmp_path / "media", fail_on="create_album")
    with pytest.raises(ExportError, match="create_album failed"):
        await export_history(_history(make_entry()), permissions, files, media)
    assert media.calls == ["create_asset", "get_album", "create_album"]
    assert len(files.writes) == 1
