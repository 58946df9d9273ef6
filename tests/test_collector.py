"""Unit tests for the staleness sweep."""

from __future__ import annotations

from datetime import timedelta

import pytest

from datastore.sensor_registry import SensorRegistry
from models.errors import CorruptReadingError
from models.records import LightState
from services.collector import StalenessCollector, SweepReport


def test_sweep_on_empty_registry(registry: SensorRegistry) -> None:
    report = StalenessCollector(registry).sweep()

    assert report == SweepReport(count_marked=0, marked_ids=[])


def test_sweep_marks_only_stale_sensors(registry: SensorRegistry, clock) -> None:
    registry.add(1, "stale")
    registry.add(2, "fresh")
    clock.advance(3000)
    registry.add_reading(2, 10.0)
    clock.advance(700)

    report = StalenessCollector(registry, threshold=3600).sweep()

    assert report.count_marked == 1
    assert report.marked_ids == [1]
    assert report.idle_seconds == {1: 3700}
    assert registry.get(1).is_active is False
    assert registry.get(2).is_active is True


def test_threshold_boundary_is_exclusive(registry: SensorRegistry, clock) -> None:
    registry.add(1, "edge")
    clock.advance(3600)
    collector = StalenessCollector(registry, threshold=3600)

    assert collector.sweep().count_marked == 0

    clock.advance(1)
    assert collector.sweep().count_marked == 1


def test_second_sweep_is_idempotent(registry: SensorRegistry, clock) -> None:
    for sensor_id in range(3):
        registry.add(sensor_id, "loc")
    clock.advance(7200)
    collector = StalenessCollector(registry, threshold=3600)

    first = collector.sweep()
    second = collector.sweep()

    assert first.count_marked == 3
    assert second.count_marked == 0


def test_sweep_never_removes_or_touches_timestamps(registry: SensorRegistry, clock) -> None:
    sensor = registry.add(1, "loc")
    created = sensor.last_updated
    clock.advance(4000)

    StalenessCollector(registry, threshold=3600).sweep()

    assert len(registry) == 1
    assert sensor.last_updated == created


def test_inactive_sensor_is_not_reactivated_by_updates(registry: SensorRegistry, clock) -> None:
    registry.add(1, "loc")
    clock.advance(4000)
    collector = StalenessCollector(registry, threshold=3600)
    collector.sweep()

    registry.add_reading(1, 5.0)
    registry.set_status(1, LightState.YELLOW)

    sensor = registry.get(1)
    assert sensor.is_active is False
    assert sensor.readings.samples == (5.0,)
    assert collector.sweep().count_marked == 0


def test_threshold_override_per_call(registry: SensorRegistry, clock) -> None:
    registry.add(1, "loc")
    clock.advance(120)
    collector = StalenessCollector(registry, threshold=3600)

    assert collector.sweep(threshold=timedelta(minutes=1)).count_marked == 1


def test_sweep_accepts_explicit_now(registry: SensorRegistry, clock) -> None:
    registry.add(1, "loc")

    report = StalenessCollector(registry, threshold=60).sweep(now=clock() + timedelta(seconds=61))

    assert report.marked_ids == [1]


def test_sweep_logs_summary(registry: SensorRegistry, clock, caplog) -> None:
    registry.add(1, "loc")
    clock.advance(4000)

    with caplog.at_level("INFO", logger="services.collector"):
        StalenessCollector(registry, threshold=3600).sweep()

    summary = [record for record in caplog.records if record.getMessage() == "Staleness sweep completed"]
    assert len(summary) == 1
    assert summary[0].count_marked == 1


def test_traffic_light_scenario(registry: SensorRegistry, clock) -> None:
    collector = StalenessCollector(registry, threshold=3600)

    sensor = registry.add(1, "Main&5th")
    assert sensor.status is LightState.RED
    assert sensor.is_active is True

    registry.add_reading(1, 45.0)
    assert sensor.readings.samples == (45.0,)

    with pytest.raises(CorruptReadingError):
        registry.add_reading(1, 1500.0)
    assert sensor.readings.samples == ()

    registry.set_status(1, 2)
    assert sensor.status is LightState.GREEN

    assert collector.sweep(now=sensor.last_updated).count_marked == 0

    clock.advance(3601)
    assert collector.sweep().count_marked == 1
    assert sensor.is_active is False
    assert [view.sensor_id for view in registry.iter_views()] == []
    listed = list(registry.iter_views(include_inactive=True))
    assert [view.sensor_id for view in listed] == [1]
    assert listed[0].is_active is False


def test_sweep_demotes_through_the_locked_registry_scan(registry: SensorRegistry, clock, monkeypatch) -> None:
    registry.add(1, "loc")
    clock.advance(4000)
    calls = []
    original = registry.deactivate_stale

    def recording(reference, limit):
        calls.append((reference, limit))
        return original(reference, limit)

    monkeypatch.setattr(registry, "deactivate_stale", recording)

    report = StalenessCollector(registry, threshold=3600).sweep()

    assert calls == [(clock(), timedelta(seconds=3600))]
    assert report.marked_ids == [1]
    assert report.idle_seconds == {1: 4000}
