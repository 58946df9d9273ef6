"""Failure taxonomy for registry operations.

Every error is recoverable at the call site. Each one also subclasses the
builtin exception a caller would naturally catch (``KeyError`` for lookups,
``ValueError`` for rejected input).
"""

from __future__ import annotations

from typing import Optional


class SensorRegistryError(Exception):
    """Base class for all registry failures."""

    def __init__(self, message: str, sensor_id: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.sensor_id = sensor_id

    def __str__(self) -> str:
        return self.message


class DuplicateIdError(SensorRegistryError, KeyError):
    def __init__(self, sensor_id: int) -> None:
        super().__init__(f"Sensor ID {sensor_id} already exists.", sensor_id)


class NotFoundError(SensorRegistryError, KeyError):
    def __init__(self, sensor_id: int) -> None:
        super().__init__(f"Sensor {sensor_id} not found.", sensor_id)


class InvalidSensorIdError(SensorRegistryError, ValueError):
    def __init__(self, sensor_id: object) -> None:
        super().__init__(
            f"Sensor ID must be a non-negative integer, got {sensor_id!r}.",
            sensor_id if isinstance(sensor_id, int) else None,
        )


class InvalidStatusError(SensorRegistryError, ValueError):
    def __init__(self, status: object, sensor_id: Optional[int] = None) -> None:
        super().__init__(
            f"Invalid status code {status!r}; expected 0 (RED), 1 (YELLOW) or 2 (GREEN).",
            sensor_id,
        )
        self.status = status


class InvalidReadingError(SensorRegistryError, ValueError):
    """Raised by a reading log for a value outside the accepted band."""

    def __init__(self, value: float, sensor_id: Optional[int] = None) -> None:
        super().__init__(f"Reading {value!r} is outside the accepted range.", sensor_id)
        self.value = value


class CorruptReadingError(SensorRegistryError, ValueError):
    """Raised after a sensor discarded its readings because of a corrupt value."""

    def __init__(self, value: float, sensor_id: int) -> None:
        super().__init__(
            f"Corrupt reading {value!r} for sensor {sensor_id}; stored readings were reset.",
            sensor_id,
        )
        self.value = value


class ResourceExhaustedError(SensorRegistryError, RuntimeError):
    def __init__(self, what: str, capacity: int, sensor_id: Optional[int] = None) -> None:
        super().__init__(f"Cannot grow {what} beyond {capacity} slots.", sensor_id)
        self.capacity = capacity


class InvalidLocationError(SensorRegistryError, ValueError):
    def __init__(self, location: object, sensor_id: Optional[int] = None) -> None:
        super().__init__(f"Location must be text, got {location!r}.", sensor_id)
