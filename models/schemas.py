"""Read-only views handed out by the registry."""

from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from models.records import LightState, Sensor


class SensorView(BaseModel):
    """Snapshot of one sensor as it looked when the listing was produced."""

    model_config = ConfigDict(frozen=True)

    sensor_id: int = Field(..., ge=0)
    location: str
    status: LightState
    last_updated: datetime
    seconds_since_update: int = Field(..., ge=0)
    is_active: bool
    reading_count: int = Field(..., ge=0)
    reading_capacity: int = Field(..., ge=0)
    readings: List[float] = Field(default_factory=list)

    @classmethod
    def from_sensor(cls, sensor: Sensor, now: datetime) -> "SensorView":
        elapsed = (now - sensor.last_updated).total_seconds()
        return cls(
            sensor_id=sensor.sensor_id,
            location=sensor.location,
            status=sensor.status,
            last_updated=sensor.last_updated,
            seconds_since_update=max(0, int(elapsed)),
            is_active=sensor.is_active,
            reading_count=len(sensor.readings),
            reading_capacity=sensor.readings.capacity,
            readings=list(sensor.readings.samples),
        )
