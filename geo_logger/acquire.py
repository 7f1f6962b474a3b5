"""Permission prompt plus a single position fix."""

from __future__ import annotations

import asyncio
import logging

from geo_logger.errors import AcquisitionFailed, PermissionDenied
from geo_logger.models import Accuracy, HistoryEntry
from geo_logger.platform import PermissionService, PositionSensor
from geo_logger.timeutils import Clock, iso_timestamp, utc_now

logger = logging.getLogger(__name__)


async def acquire_position(
    permissions: PermissionService,
    sensor: PositionSensor,
    *,
    accuracy: Accuracy = Accuracy.HIGH,
    clock: Clock = utc_now,
    timeout_seconds: float | None = None,
) -> HistoryEntry:
    """Ask for foreground location permission, then request one fix.

    Args:
        permissions: Platform permission service.
        sensor: Position sensor.
        accuracy: Accuracy mode for the fix.
        clock: Wall clock used for the export timestamp.
        timeout_seconds: Give up on the sensor after this long. None waits for
            as long as the platform takes.

    Returns:
        The reading stamped with the capture instant.

    Raises:
        PermissionDenied: Location permission was not granted.
        AcquisitionFailed: The platform failed to deliver a fix.
    """

    try:
        response = await permissions.request_foreground_location()
    except Exception as exc:
        logger.warning("location permission request failed: %s", exc)
        raise AcquisitionFailed(str(exc)) from exc
    if not response.granted:
        logger.warning("location permission %s", response.status)
        raise PermissionDenied("location")

    logger.debug("requesting position fix (accuracy=%s)", accuracy.name)
    try:
        if timeout_seconds is None:
            reading = await sensor.get_current_position(accuracy)
        else:
            reading = await asyncio.wait_for(sensor.get_current_position(accuracy), timeout_seconds)
    except TimeoutError as exc:
        logger.warning("position fix timed out (timeout=%s)", timeout_seconds)
        if timeout_seconds is None:
            raise AcquisitionFailed(str(exc) or "Location request timed out") from exc
        raise AcquisitionFailed(f"Location request timed out after {timeout_seconds:g} seconds") from exc
    except Exception as exc:
        logger.warning("position fix failed: %s", exc)
        raise AcquisitionFailed(str(exc)) from exc

    entry = HistoryEntry(reading=reading, timestamp=iso_timestamp(clock()))
    logger.info("location obtained: lat=%s lon=%s acc=%sm", reading.latitude, reading.longitude, reading.accuracy)
    return entry
