"""Data models for position readings and history entries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Final


DEFAULT_TZ: Final[str] = "Asia/Shanghai"
DEFAULT_ALBUM: Final[str] = "Download"


class Accuracy(IntEnum):
    """Sensor accuracy modes, from power-saving to navigation grade."""

    LOWEST = 1
    LOW = 2
    BALANCED = 3
    HIGH = 4
    HIGHEST = 5
    BEST_FOR_NAVIGATION = 6


@dataclass(frozen=True, slots=True)
class PositionReading:
    """A single fix as reported by the platform sensor.

    Attributes:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        altitude: Altitude in meters, None when the sensor cannot tell.
        accuracy: Horizontal accuracy radius in meters.
        speed: Speed in meters/second, None when unknown.
        heading: Course over ground in degrees, None when unknown.
        timestamp_ms: Sensor-assigned capture instant, Unix epoch milliseconds.
        altitude_accuracy: Vertical accuracy in meters, None when unknown.
    """

    latitude: float
    longitude: float
    altitude: float | None
    accuracy: float
    speed: float | None
    heading: float | None
    timestamp_ms: int
    altitude_accuracy: float | None = None


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """A reading plus the ISO-8601 export timestamp assigned at capture time.

    Note:
        ``timestamp`` is the wall-clock instant the app received the fix. It is
        distinct from ``reading.timestamp_ms`` and is what the history list and
        the exported file show.
    """

    reading: PositionReading
    timestamp: str

    @property
    def latitude(self) -> float:
        return self.reading.latitude

    @property
    def longitude(self) -> float:
        return self.reading.longitude
