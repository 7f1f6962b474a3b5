"""Platform service contracts and their local, directory-backed implementations.

The app only talks to the device through the four protocols below. Every call
is a coroutine; callers ``await`` them directly instead of nesting callbacks.
"""

from __future__ import annotations

import logging
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

from geo_logger.models import Accuracy, PositionReading

logger = logging.getLogger(__name__)

GRANTED = "granted"
DENIED = "denied"
UNDETERMINED = "undetermined"


@dataclass(frozen=True, slots=True)
class PermissionResponse:
    """Answer of a permission prompt."""

    status: str

    @property
    def granted(self) -> bool:
        return self.status == GRANTED


@dataclass(frozen=True, slots=True)
class MediaAsset:
    """A file registered with the media library (distinct from its source path)."""

    asset_id: str
    filename: str
    uri: str


@dataclass(frozen=True, slots=True)
class MediaAlbum:
    """A named collection of assets."""

    album_id: str
    title: str
    directory: str


class PermissionService(Protocol):
    async def request_foreground_location(self) -> PermissionResponse: ...

    async def request_media_library(self) -> PermissionResponse: ...


class PositionSensor(Protocol):
    async def get_current_position(self, accuracy: Accuracy) -> PositionReading: ...


class FileSystem(Protocol):
    @property
    def document_directory(self) -> Path: ...

    async def write_text(self, path: Path, contents: str) -> Path: ...

    async def delete(self, path: Path) -> None: ...


class MediaLibrary(Protocol):
    async def create_asset(self, path: Path) -> MediaAsset: ...

    async def get_album(self, name: str) -> MediaAlbum | None: ...

    async def create_album(self, name: str, asset: MediaAsset, copy_asset: bool = False) -> MediaAlbum: ...

    async def add_assets_to_album(
        self,
        assets: Sequence[MediaAsset],
        album: MediaAlbum,
        copy_asset: bool = False,
    ) -> None: ...


@dataclass(frozen=True, slots=True)
class Platform:
    """The services one session works against."""

    permissions: PermissionService
    sensor: PositionSensor
    files: FileSystem
    media: MediaLibrary


class StaticPermissions:
    """Permission service answering every prompt with a fixed policy."""

    def __init__(self, location: bool = True, media: bool = True) -> None:
        self.location = location
        self.media = media

    async def request_foreground_location(self) -> PermissionResponse:
        return PermissionResponse(GRANTED if self.location else DENIED)

    async def request_media_library(self) -> PermissionResponse:
        return PermissionResponse(GRANTED if self.media else DENIED)


class LocalFileSystem:
    """Filesystem rooted at an application-private documents directory."""

    def __init__(self, document_directory: str | Path) -> None:
        self._root = Path(document_directory)

    @property
    def document_directory(self) -> Path:
        return self._root

    async def write_text(self, path: Path, contents: str) -> Path:
        """Write ``contents`` as the whole file (UTF-8), replacing any existing file."""

        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", encoding="utf-8", newline="") as f:
            f.write(contents)
        return p

    async def delete(self, path: Path) -> None:
        Path(path).unlink(missing_ok=True)


class DirectoryMediaLibrary:
    """Media library laid out as directories under ``root``.

    Layout:
        - ``root/.assets/``: files registered by :meth:`create_asset`
        - ``root/<album name>/``: one directory per album

    Filing an asset into an album moves it out of ``.assets`` unless
    ``copy_asset`` is set. Existing album files are never replaced; a clashing
    name gets a numeric suffix.
    """

    ASSETS_DIR = ".assets"

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        # asset_id -> current file location
        self._locations: dict[str, Path] = {}

    @property
    def root(self) -> Path:
        return self._root

    async def create_asset(self, path: Path) -> MediaAsset:
        src = Path(path)
        if not src.is_file():
            raise FileNotFoundError(f"asset source does not exist: {src}")
        assets_dir = self._root / self.ASSETS_DIR
        assets_dir.mkdir(parents=True, exist_ok=True)
        dest = _free_name(assets_dir / src.name)
        shutil.copy2(src, dest)
        asset = MediaAsset(asset_id=uuid.uuid4().hex, filename=src.name, uri=dest.as_uri())
        self._locations[asset.asset_id] = dest
        logger.debug("registered asset %s -> %s", asset.asset_id, dest)
        return asset

    async def get_album(self, name: str) -> MediaAlbum | None:
        d = self._album_dir(name)
        if not d.is_dir():
            return None
        return MediaAlbum(album_id=name, title=name, directory=str(d))

    async def create_album(self, name: str, asset: MediaAsset, copy_asset: bool = False) -> MediaAlbum:
        d = self._album_dir(name)
        d.mkdir(parents=True, exist_ok=False)
        album = MediaAlbum(album_id=name, title=name, directory=str(d))
        self._file_into(asset, d, copy_asset)
        logger.info("created album %r", name)
        return album

    async def add_assets_to_album(
        self,
        assets: Sequence[MediaAsset],
        album: MediaAlbum,
        copy_asset: bool = False,
    ) -> None:
        d = Path(album.directory)
        if not d.is_dir():
            raise FileNotFoundError(f"album does not exist: {album.title!r}")
        for asset in assets:
            self._file_into(asset, d, copy_asset)

    def album_assets(self, album: MediaAlbum) -> list[str]:
        """Filenames currently in the album, sorted."""

        return sorted(p.name for p in Path(album.directory).iterdir() if p.is_file())

    def _album_dir(self, name: str) -> Path:
        if not name or name in (".", "..", self.ASSETS_DIR) or "/" in name or "\\" in name:
            raise ValueError(f"invalid album name: {name!r}")
        return self._root / name

    def _file_into(self, asset: MediaAsset, directory: Path, copy_asset: bool) -> None:
        src = self._locations.get(asset.asset_id)
        if src is None or not src.exists():
            raise FileNotFoundError(f"unknown asset: {asset.asset_id}")
        dest = _free_name(directory / asset.filename)
        if copy_asset:
            shutil.copy2(src, dest)
        else:
            shutil.move(src, dest)
            self._locations[asset.asset_id] = dest


def _free_name(path: Path) -> Path:
    """``path`` itself, or ``stem_N.suffix`` for the first N that does not exist."""

    if not path.exists():
        return path
    n = 1
    while True:
        candidate = path.with_name(f"{path.stem}_{n}{path.suffix}")
        if not candidate.exists():
            return candidate
        n += 1
