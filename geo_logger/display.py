"""Display-only formatting of positions and history rows.

Nothing here feeds back into stored data or the exported file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from geo_logger.models import HistoryEntry, PositionReading
from geo_logger.timeutils import local_time_label

DISPLAY_DECIMALS = 6


@dataclass(frozen=True, slots=True)
class HistoryRow:
    label: str
    coords: str


def truncate_coord(value: float, decimals: int = DISPLAY_DECIMALS) -> str:
    """Fixed-point text with ``decimals`` digits, e.g. 30.7456421 -> "30.745642"."""

    return f"{value:.{decimals}f}"


def current_position_lines(reading: PositionReading) -> list[str]:
    return [
        f"Longitude: {reading.longitude}",
        f"Latitude: {reading.latitude}",
        f"Accuracy: {reading.accuracy} meters",
    ]


def history_rows(entries: Iterable[HistoryEntry], tz_name: str) -> list[HistoryRow]:
    rows: list[HistoryRow] = []
    for i, e in enumerate(entries, start=1):
        rows.append(
            HistoryRow(
                label=f"Location #{i} ({local_time_label(e.timestamp, tz_name)})",
                coords=f"Lat: {truncate_coord(e.latitude)}, Long: {truncate_coord(e.longitude)}",
            )
        )
    return rows
