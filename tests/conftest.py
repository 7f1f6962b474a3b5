"""Shared fakes for the platform services."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from geo_logger.models import Accuracy, HistoryEntry, PositionReading
from geo_logger.platform import (
    DENIED,
    GRANTED,
    DirectoryMediaLibrary,
    LocalFileSystem,
    PermissionResponse,
    Platform,
)


def make_reading(lat: float = 30.7456421, lon: float = 103.9284974, **kw) -> PositionReading:
    values = dict(
        latitude=lat,
        longitude=lon,
        altitude=512.3,
        accuracy=8.5,
        speed=1.25,
        heading=90.5,
        timestamp_ms=1_766_000_000_000,
    )
    values.update(kw)
    return PositionReading(**values)


def make_entry(lat: float = 30.7456421, lon: float = 103.9284974, timestamp: str = "2025-12-18T01:30:00.000Z", **kw) -> HistoryEntry:
    return HistoryEntry(reading=make_reading(lat, lon, **kw), timestamp=timestamp)


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 12, 18, 1, 30, 0, 123000, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class FakePermissions:
    def __init__(self, location: bool = True, media: bool = True) -> None:
        self.location = location
        self.media = media
        self.calls: list[str] = []

    async def request_foreground_location(self) -> PermissionResponse:
        self.calls.append("location")
        return PermissionResponse(GRANTED if self.location else DENIED)

    async def request_media_library(self) -> PermissionResponse:
        self.calls.append("media")
        return PermissionResponse(GRANTED if self.media else DENIED)


class FakeSensor:
    """Returns queued readings; an Exception in the queue is raised instead."""

    def __init__(self, *items) -> None:
        self.items = list(items)
        self.calls: list[Accuracy] = []
        self.gate: asyncio.Event | None = None

    async def get_current_position(self, accuracy: Accuracy) -> PositionReading:
        self.calls.append(accuracy)
        if self.gate is not None:
            await self.gate.wait()
        item = self.items.pop(0) if self.items else make_reading()
        if isinstance(item, BaseException):
            raise item
        return item


class RecordingFileSystem(LocalFileSystem):
    def __init__(self, root: Path, fail: Exception | None = None) -> None:
        super().__init__(root)
        self.fail = fail
        self.writes: list[Path] = []
        self.deletes: list[Path] = []

    async def write_text(self, path: Path, contents: str) -> Path:
        if self.fail is not None:
            raise self.fail
        self.writes.append(Path(path))
        return await super().write_text(path, contents)

    async def delete(self, path: Path) -> None:
        self.deletes.append(Path(path))
        await super().delete(path)


class RecordingMediaLibrary(DirectoryMediaLibrary):
    def __init__(self, root: Path, fail_on: str | None = None) -> None:
        super().__init__(root)
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise OSError(f"{name} failed")

    async def create_asset(self, path):
        self._record("create_asset")
        return await super().create_asset(path)

    async def get_album(self, name):
        self._record("get_album")
        return await super().get_album(name)

    async def create_album(self, name, asset, copy_asset=False):
        self._record("create_album")
        return await super().create_album(name, asset, copy_asset)

    async def add_assets_to_album(self, assets, album, copy_asset=False):
        self._record("add_assets_to_album")
        return await super().add_assets_to_album(assets, album, copy_asset)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def permissions() -> FakePermissions:
    return FakePermissions()


@pytest.fixture
def sensor() -> FakeSensor:
    return FakeSensor()


@pytest.fixture
def files(tmp_path: Path) -> RecordingFileSystem:
    return RecordingFileSystem(tmp_path / "documents")


@pytest.fixture
def media(tmp_path: Path) -> RecordingMediaLibrary:
    return RecordingMediaLibrary(tmp_path / "media")


@pytest.fixture
def platform(permissions, sensor, files, media) -> Platform:
    return Platform(permissions=permissions, sensor=sensor, files=files, media=media)
