"""Domain models owned by the sensor registry."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import List, Optional, Tuple, Union

from models.errors import (
    CorruptReadingError,
    InvalidLocationError,
    InvalidReadingError,
    InvalidStatusError,
    ResourceExhaustedError,
)

logger = logging.getLogger(__name__)

MIN_READING = 0.0
MAX_READING = 1000.0
LOCATION_MAX_LENGTH = 49
DEFAULT_CAPACITY = 4


class LightState(IntEnum):
    """Traffic light phase reported by a sensor."""

    RED = 0
    YELLOW = 1
    GREEN = 2

    @classmethod
    def parse(cls, value: Union["LightState", int]) -> "LightState":
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidStatusError(value)
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidStatusError(value) from exc


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_reading(value: float) -> bool:
    """A reading is valid iff it lies in the closed band [0, 1000]."""
    return not math.isnan(value) and MIN_READING <= value <= MAX_READING


def next_capacity(current: int, initial: int, limit: Optional[int]) -> Optional[int]:
    """Return the grown slot count, or ``None`` when growth is impossible.

    Capacity doubles (starting from ``initial``) and is clamped to ``limit``.
    Growth always adds at least one slot.
    """
    proposed = max(current * 2, initial, current + 1)
    if limit is None:
        return proposed
    if current >= limit:
        return None
    return min(proposed, limit)


class ReadingLog:
    """Append-only samples for one sensor with an explicit doubling capacity."""

    def __init__(
        self,
        initial_capacity: int = DEFAULT_CAPACITY,
        max_capacity: Optional[int] = None,
    ) -> None:
        if initial_capacity < 1:
            raise ValueError("initial_capacity must be at least 1.")
        if max_capacity is not None:
            initial_capacity = min(initial_capacity, max_capacity)
        self._samples: List[float] = []
        self._initial_capacity = initial_capacity
        self._capacity = initial_capacity
        self.max_capacity = max_capacity

    @property
    def samples(self) -> Tuple[float, ...]:
        return tuple(self._samples)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._samples)

    def append(self, value: float) -> None:
        value = float(value)
        if not is_valid_reading(value):
            raise InvalidReadingError(value)

        if len(self._samples) >= self._capacity:
            grown = next_capacity(self._capacity, self._initial_capacity, self.max_capacity)
            if grown is None:
                raise ResourceExhaustedError("reading log", self._capacity)
            self._capacity = grown

        self._samples.append(value)

    def reset(self) -> None:
        """Drop every sample; capacity is retained."""
        self._samples.clear()


@dataclass(slots=True)
class Sensor:
    """A traffic sensor and the readings it has reported."""

    sensor_id: int
    location: str
    last_updated: datetime
    status: LightState = LightState.RED
    is_active: bool = True
    readings: ReadingLog = field(default_factory=ReadingLog)

    def __post_init__(self) -> None:
        if not isinstance(self.location, str):
            raise InvalidLocationError(self.location, self.sensor_id)
        self.location = self.location[:LOCATION_MAX_LENGTH]

    def set_status(self, state: Union[LightState, int], now: Optional[datetime] = None) -> None:
        try:
            self.status = LightState.parse(state)
        except InvalidStatusError as exc:
            exc.sensor_id = self.sensor_id
            raise
        self.last_updated = now or now_utc()

    def record_reading(self, value: float, now: Optional[datetime] = None) -> None:
        try:
            self.readings.append(value)
        except InvalidReadingError as exc:
            self._recover_from_corruption(exc.value, now or now_utc())
            raise CorruptReadingError(exc.value, self.sensor_id) from exc
        except ResourceExhaustedError as exc:
            exc.sensor_id = self.sensor_id
            raise
        self.last_updated = now or now_utc()

    def deactivate(self) -> None:
        self.is_active = False

    def _recover_from_corruption(self, value: float, now: datetime) -> None:
        # An out-of-band value means the whole buffer is suspect.
        logger.warning(
            "Corrupt reading detected; discarding stored readings",
            extra={
                "sensor_id": self.sensor_id,
                "value": value,
                "reading_count": len(self.readings),
                "capacity": self.readings.capacity,
            },
        )
        self.readings.reset()
        self.last_updated = now
