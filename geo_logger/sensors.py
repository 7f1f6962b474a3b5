"""Position sensors usable off-device: seeded simulation and track replay."""

from __future__ import annotations

import logging
import random
from typing import Sequence

from geo_logger.models import Accuracy, PositionReading
from geo_logger.timeutils import Clock, epoch_ms_from_dt, utc_now

logger = logging.getLogger(__name__)

# Reported horizontal accuracy (meters) per mode; coarser modes report a wider radius.
_ACCURACY_RADIUS_M: dict[Accuracy, float] = {
    Accuracy.LOWEST: 3000.0,
    Accuracy.LOW: 1000.0,
    Accuracy.BALANCED: 100.0,
    Accuracy.HIGH: 10.0,
    Accuracy.HIGHEST: 5.0,
    Accuracy.BEST_FOR_NAVIGATION: 3.0,
}


class SensorUnavailable(RuntimeError):
    """The sensor has no fix to give."""


class SimulatedPositionSensor:
    """Fixes jittered around a fixed center, reproducible via ``seed``.

    Args:
        center_lat: Center latitude in degrees.
        center_lon: Center longitude in degrees.
        seed: Random seed.
        jitter_deg: Maximum offset from the center, in degrees.
        clock: Source of the sensor timestamp.
    """

    def __init__(
        self,
        center_lat: float,
        center_lon: float,
        *,
        seed: int = 0,
        jitter_deg: float = 0.0015,
        clock: Clock = utc_now,
    ) -> None:
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.jitter_deg = jitter_deg
        self._rng = random.Random(seed)
        self._clock = clock

    async def get_current_position(self, accuracy: Accuracy) -> PositionReading:
        rng = self._rng
        radius = _ACCURACY_RADIUS_M[Accuracy(accuracy)]
        # Mostly standing still; occasionally walking with a known course
        moving = rng.random() < 0.3
        return PositionReading(
            latitude=self.center_lat + rng.uniform(-self.jitter_deg, self.jitter_deg),
            longitude=self.center_lon + rng.uniform(-self.jitter_deg, self.jitter_deg),
            altitude=round(rng.uniform(480.0, 520.0), 1) if rng.random() < 0.8 else None,
            accuracy=round(radius * rng.uniform(0.5, 1.5), 1),
            speed=round(rng.uniform(0.5, 1.8), 2) if moving else None,
            heading=round(rng.uniform(0.0, 360.0), 1) if moving else None,
            timestamp_ms=epoch_ms_from_dt(self._clock()),
            altitude_accuracy=round(rng.uniform(3.0, 15.0), 1),
        )


class ReplayPositionSensor:
    """Hands out recorded readings one per request, in order.

    Raises:
        SensorUnavailable: Once the recording is exhausted (unless ``loop``).
    """

    def __init__(self, readings: Sequence[PositionReading], *, loop: bool = False) -> None:
        self._readings = list(readings)
        self._pos = 0
        self.loop = loop

    @property
    def remaining(self) -> int:
        return len(self._readings) - self._pos

    async def get_current_position(self, accuracy: Accuracy) -> PositionReading:
        if self._pos >= len(self._readings):
            if not self.loop or not self._readings:
                raise SensorUnavailable("no more recorded positions")
            self._pos = 0
        reading = self._readings[self._pos]
        self._pos += 1
        logger.debug("replaying reading %s/%s", self._pos, len(self._readings))
        return reading
