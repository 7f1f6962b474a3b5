"""Render the session history to text and publish it into a media album."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from geo_logger.errors import ExportError, NothingToExport, PermissionDenied
from geo_logger.history import SessionHistory
from geo_logger.models import DEFAULT_ALBUM, HistoryEntry
from geo_logger.platform import FileSystem, MediaAlbum, MediaAsset, MediaLibrary, PermissionService
from geo_logger.timeutils import Clock, iso_timestamp, utc_now

logger = logging.getLogger(__name__)

SEPARATOR = "-" * 30
FILENAME_PREFIX = "geolocation_"
FILENAME_SUFFIX = ".txt"


@dataclass(frozen=True, slots=True)
class ExportResult:
    """What a successful export produced."""

    path: Path
    asset: MediaAsset
    album: MediaAlbum
    created_album: bool
    entries: int


def format_value(value: float | None) -> str:
    """Render a number the way the export format expects.

    None becomes ``null`` and whole floats drop the trailing ``.0``
    (``37.0`` -> ``37``); everything else uses the shortest repr.
    """

    if value is None:
        return "null"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
    return repr(value)


def render_entry(index: int, entry: HistoryEntry) -> str:
    """One block of the export; ``index`` is 1-based."""

    r = entry.reading
    return (
        f"Location #{index} ({entry.timestamp}):\n"
        f"Latitude: {format_value(r.latitude)}\n"
        f"Longitude: {format_value(r.longitude)}\n"
        f"Altitude: {format_value(r.altitude)}\n"
        f"Accuracy: {format_value(r.accuracy)} meters\n"
        f"Speed: {format_value(r.speed)}\n"
        f"Heading: {format_value(r.heading)}\n"
        f"{SEPARATOR}\n"
    )


def render_history(entries: Iterable[HistoryEntry]) -> str:
    """All blocks in capture order, joined by a blank line."""

    return "\n".join(render_entry(i, e) for i, e in enumerate(entries, start=1))


def export_filename(now: datetime) -> str:
    """``geolocation_<ISO timestamp>.txt`` with colons replaced by hyphens."""

    return f"{FILENAME_PREFIX}{iso_timestamp(now).replace(':', '-')}{FILENAME_SUFFIX}"


async def export_history(
    history: SessionHistory,
    permissions: PermissionService,
    files: FileSystem,
    media: MediaLibrary,
    *,
    album_name: str = DEFAULT_ALBUM,
    clock: Clock = utc_now,
    cleanup_on_failure: bool = False,
) -> ExportResult:
    """Write the history to a text file and file it into ``album_name``.

    Steps stop at the first failure and nothing is rolled back, so a file that
    was written but could not be registered stays in the documents directory.
    ``cleanup_on_failure`` removes it in that case.

    Raises:
        NothingToExport: History is empty; no service is called.
        PermissionDenied: Media library permission refused; nothing is written.
        ExportError: Any later step failed.
    """

    entries = history.iterate()
    if not entries:
        raise NothingToExport()

    try:
        response = await permissions.request_media_library()
    except Exception as exc:
        raise ExportError(str(exc)) from exc
    if not response.granted:
        logger.warning("media library permission %s", response.status)
        raise PermissionDenied("media")

    text = render_history(entries)
    path = files.document_directory / export_filename(clock())

    try:
        await files.write_text(path, text)
    except Exception as exc:
        logger.error("writing %s failed: %s", path, exc)
        raise ExportError(str(exc)) from exc

    try:
        asset = await media.create_asset(path)
    except Exception as exc:
        logger.error("registering %s as asset failed: %s", path, exc)
        if cleanup_on_failure:
            await _discard(files, path)
        raise ExportError(str(exc)) from exc

    try:
        album = await media.get_album(album_name)
        created = album is None
        if album is None:
            album = await media.create_album(album_name, asset, copy_asset=False)
        else:
            await media.add_assets_to_album([asset], album, copy_asset=False)
    except Exception as exc:
        logger.error("filing asset into album %r failed: %s", album_name, exc)
        raise ExportError(str(exc)) from exc

    logger.info("exported %s entries to %s (album %r)", len(entries), path.name, album_name)
    return ExportResult(path=path, asset=asset, album=album, created_album=created, entries=len(entries))


async def _discard(files: FileSystem, path: Path) -> None:
    try:
        await files.delete(path)
    except Exception as exc:
        # Report the registration failure, not this one
        logger.warning("could not remove orphaned file %s: %s", path, exc)
