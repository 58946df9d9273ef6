from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from datastore.sensor_registry import SensorRegistry


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def registry(clock: FakeClock) -> SensorRegistry:
    return SensorRegistry(clock=clock)
