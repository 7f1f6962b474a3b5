"""Application configuration and assembly of the local platform."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from geo_logger.models import DEFAULT_ALBUM, DEFAULT_TZ, Accuracy
from geo_logger.platform import (
    DirectoryMediaLibrary,
    LocalFileSystem,
    Platform,
    PositionSensor,
    StaticPermissions,
)
from geo_logger.timeutils import tzinfo_from_name


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Settings for one session. Defaults suit a local run from the repo root."""

    tz_name: str = DEFAULT_TZ
    documents_dir: Path = Path("documents")
    media_root: Path = Path("media")
    album_name: str = DEFAULT_ALBUM
    accuracy: Accuracy = Accuracy.HIGH
    # None: wait as long as the sensor takes
    acquire_timeout_seconds: float | None = None
    # Remove the written file when registering it as an asset fails
    cleanup_on_failure: bool = False
    allow_location: bool = True
    allow_media: bool = True

    def validate(self) -> "AppConfig":
        """Return self, or raise ValueError on an unusable setting."""

        tzinfo_from_name(self.tz_name)
        if self.acquire_timeout_seconds is not None and self.acquire_timeout_seconds <= 0:
            raise ValueError(f"acquire_timeout_seconds 必须为正数：{self.acquire_timeout_seconds!r}")
        if not self.album_name.strip():
            raise ValueError("album_name 不能为空")
        return self


def build_platform(config: AppConfig, sensor: PositionSensor) -> Platform:
    """Local services: policy permissions, documents dir, directory media library."""

    return Platform(
        permissions=StaticPermissions(location=config.allow_location, media=config.allow_media),
        sensor=sensor,
        files=LocalFileSystem(config.documents_dir),
        media=DirectoryMediaLibrary(config.media_root),
    )
