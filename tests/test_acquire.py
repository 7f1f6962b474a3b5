from __future__ import annotations

import asyncio

import pytest

from geo_logger.acquire import acquire_position
from geo_logger.errors import AcquisitionFailed, PermissionDenied
from geo_logger.models import Accuracy
from tests.conftest import FakePermissions, FakeSensor, StepClock, make_reading


@pytest.mark.asyncio
async def test_success_stamps_reading_with_clock():
    reading = make_reading(lat=1.5, lon=2.5)
    entry = await acquire_position(FakePermissions(), FakeSensor(reading), clock=StepClock())

    assert entry.reading is reading
    assert entry.timestamp == "2025-12-18T01:30:00.123Z"


@pytest.mark.asyncio
async def test_uses_high_accuracy_by_default():
    sensor = FakeSensor()
    await acquire_position(FakePermissions(), sensor)
    assert sensor.calls == [Accuracy.HIGH]


@pytest.mark.asyncio
async def test_permission_denied_skips_sensor():
    sensor = FakeSensor()
    with pytest.raises(PermissionDenied) as info:
        await acquire_position(FakePermissions(location=False), sensor)
    assert info.value.kind == "location"
    assert sensor.calls == []


@pytest.mark.asyncio
async def test_sensor_error_becomes_acquisition_failed():
    sensor = FakeSensor(RuntimeError("Location services are disabled"))
    with pytest.raises(AcquisitionFailed, match="Location services are disabled"):
        await acquire_position(FakePermissions(), sensor)


@pytest.mark.asyncio
async def test_timeout_becomes_acquisition_failed():
    sensor = FakeSensor()
    sensor.gate = asyncio.Event()  # never set
    with pytest.raises(AcquisitionFailed, match="timed out"):
        await acquire_position(FakePermissions(), sensor, timeout_seconds=0.01)


@pytest.mark.asyncio
async def test_no_timeout_waits_for_slow_sensor():
    sensor = FakeSensor()
    sensor.gate = asyncio.Event()
    task = asyncio.create_task(acquire_position(FakePermissions(), sensor))
    await asyncio.sleep(0.01)
    assert not task.done()
    sensor.gate.set()
    entry = await task
    assert entry.reading.latitude == pytest.approx(30.7456421)
