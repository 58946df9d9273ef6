"""Staleness sweep that demotes silent sensors."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Dict, List, Optional, Union

from datastore.sensor_registry import SensorRegistry, build_default_registry
from settings import get_settings

logger = logging.getLogger(__name__)

Threshold = Union[timedelta, float, int]


@dataclass
class SweepReport:
    """Outcome of one sweep."""

    count_marked: int = 0
    marked_ids: List[int] = field(default_factory=list)
    idle_seconds: Dict[int, int] = field(default_factory=dict)


def _as_timedelta(threshold: Threshold) -> timedelta:
    if isinstance(threshold, timedelta):
        return threshold
    return timedelta(seconds=float(threshold))


class StalenessCollector:
    """Marks active sensors inactive once they have been silent too long.

    The collector never deletes entries, never touches ``last_updated`` and never
    reactivates a sensor, so back-to-back sweeps are idempotent.
    """

    def __init__(self, registry: SensorRegistry, threshold: Threshold = 3600.0) -> None:
        self.registry = registry
        self.threshold = _as_timedelta(threshold)

    def sweep(
        self,
        now: Optional[datetime] = None,
        threshold: Optional[Threshold] = None,
    ) -> SweepReport:
        reference = now or self.registry.now()
        limit = self.threshold if threshold is None else _as_timedelta(threshold)
        report = SweepReport()

        for sensor_id, idle in self.registry.deactivate_stale(reference, limit):
            idle_s = int(idle.total_seconds())
            report.count_marked += 1
            report.marked_ids.append(sensor_id)
            report.idle_seconds[sensor_id] = idle_s
            logger.info(
                "Marking sensor inactive",
                extra={"sensor_id": sensor_id, "idle_s": idle_s},
            )

        logger.info(
            "Staleness sweep completed",
            extra={
                "count_marked": report.count_marked,
                "threshold_s": int(limit.total_seconds()),
            },
        )
        return report


@lru_cache
def build_default_collector(threshold: Optional[float] = None) -> StalenessCollector:
    """Factory that wires the collector to the default registry."""
    settings = get_settings()
    return StalenessCollector(
        registry=build_default_registry(),
        threshold=settings.stale_threshold_seconds if threshold is None else threshold,
    )
