from __future__ import annotations

import logging
from datetime import datetime, timedelta
from functools import lru_cache
from threading import RLock
from typing import Callable, Iterator, List, Optional, Tuple, Union

from models.errors import (
    DuplicateIdError,
    InvalidSensorIdError,
    NotFoundError,
    ResourceExhaustedError,
)
from models.records import (
    DEFAULT_CAPACITY,
    LightState,
    ReadingLog,
    Sensor,
    next_capacity,
    now_utc,
)
from models.schemas import SensorView
from settings import get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class SensorRegistry:
    """In-memory collection of sensors keyed by a unique integer id.

    Entries keep insertion order. Lookups are a linear scan, which is plenty
    for a district's worth of sensors.
    """

    def __init__(
        self,
        clock: Clock = now_utc,
        initial_capacity: int = DEFAULT_CAPACITY,
        max_sensors: Optional[int] = None,
        reading_capacity: int = DEFAULT_CAPACITY,
        max_readings: Optional[int] = None,
    ) -> None:
        if initial_capacity < 1 or reading_capacity < 1:
            raise ValueError("Registry and reading capacities must be at least 1.")
        self._clock = clock
        self._entries: List[Sensor] = []
        self._initial_capacity = initial_capacity
        self._capacity = 0
        self.max_sensors = max_sensors
        self.reading_capacity = reading_capacity
        self.max_readings = max_readings
        self._lock = RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def now(self) -> datetime:
        return self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, sensor_id: object) -> bool:
        if not isinstance(sensor_id, int):
            return False
        return self.find(sensor_id) is not None

    def find(self, sensor_id: int) -> Optional[Sensor]:
        with self._lock:
            for sensor in self._entries:
                if sensor.sensor_id == sensor_id:
                    return sensor
            return None

    def get(self, sensor_id: int) -> Sensor:
        sensor = self.find(sensor_id)
        if sensor is None:
            raise NotFoundError(sensor_id)
        return sensor

    def add(self, sensor_id: int, location: str) -> Sensor:
        if isinstance(sensor_id, bool) or not isinstance(sensor_id, int) or sensor_id < 0:
            raise InvalidSensorIdError(sensor_id)

        with self._lock:
            if self.find(sensor_id) is not None:
                raise DuplicateIdError(sensor_id)

            sensor = Sensor(
                sensor_id=sensor_id,
                location=location,
                last_updated=self._clock(),
                readings=ReadingLog(
                    initial_capacity=self.reading_capacity,
                    max_capacity=self.max_readings,
                ),
            )

            if len(self._entries) >= self._capacity:
                grown = next_capacity(self._capacity, self._initial_capacity, self.max_sensors)
                if grown is None:
                    raise ResourceExhaustedError("sensor registry", self._capacity, sensor_id)
                self._capacity = grown

            self._entries.append(sensor)

        logger.info(
            "Sensor added",
            extra={"sensor_id": sensor_id, "location": sensor.location},
        )
        return sensor

    def remove(self, sensor_id: int) -> None:
        with self._lock:
            for index, sensor in enumerate(self._entries):
                if sensor.sensor_id == sensor_id:
                    # Survivors shift down and keep their relative order.
                    del self._entries[index]
                    break
            else:
                raise NotFoundError(sensor_id)

        logger.info("Sensor removed", extra={"sensor_id": sensor_id})

    def add_reading(self, sensor_id: int, value: float) -> None:
        with self._lock:
            sensor = self.get(sensor_id)
            sensor.record_reading(value, now=self._clock())
            count = len(sensor.readings)

        logger.debug(
            "Reading stored",
            extra={"sensor_id": sensor_id, "value": float(value), "reading_count": count},
        )

    def set_status(self, sensor_id: int, state: Union[LightState, int]) -> LightState:
        with self._lock:
            sensor = self.get(sensor_id)
            sensor.set_status(state, now=self._clock())
            status = sensor.status

        logger.info(
            "Sensor status changed",
            extra={"sensor_id": sensor_id, "status": status.name},
        )
        return status

    def sensors(self, include_inactive: bool = True) -> List[Sensor]:
        """Return the live sensor handles in display order."""
        with self._lock:
            return [
                sensor
                for sensor in self._entries
                if include_inactive or sensor.is_active
            ]

    def deactivate_stale(self, reference: datetime, limit: timedelta) -> List[Tuple[int, timedelta]]:
        """Demote active sensors idle longer than ``limit``; return ``(sensor_id, idle)`` pairs.

        The idle check and the demotion happen under a single lock hold.
        """
        demoted: List[Tuple[int, timedelta]] = []
        with self._lock:
            for sensor in self._entries:
                if not sensor.is_active:
                    continue
                idle = reference - sensor.last_updated
                if idle <= limit:
                    continue
                sensor.deactivate()
                demoted.append((sensor.sensor_id, idle))
        return demoted

    def iter_views(
        self,
        include_inactive: bool = False,
        now: Optional[datetime] = None,
    ) -> Iterator[SensorView]:
        """Lazily yield read-only views; every call rescans the current entries."""
        reference = now or self._clock()
        for sensor in self.sensors(include_inactive=include_inactive):
            yield SensorView.from_sensor(sensor, reference)

    def clear(self) -> None:
        """Release every sensor and its readings."""
        with self._lock:
            released = len(self._entries)
            self._entries.clear()
            self._capacity = 0

        if released:
            logger.info("Registry cleared; released %d sensors", released)


@lru_cache
def build_default_registry(clock: Optional[Clock] = None) -> SensorRegistry:
    settings = get_settings()
    return SensorRegistry(
        clock=clock or now_utc,
        initial_capacity=DEFAULT_CAPACITY,
        max_sensors=settings.max_sensors,
        reading_capacity=settings.reading_initial_capacity,
        max_readings=settings.max_readings_per_sensor,
    )
