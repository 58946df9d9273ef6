from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_STALE_THRESHOLD_ENV = "TRAFFIC_STALE_THRESHOLD_SECONDS"
_READING_CAPACITY_ENV = "TRAFFIC_READING_INITIAL_CAPACITY"
_MAX_READINGS_ENV = "TRAFFIC_MAX_READINGS_PER_SENSOR"
_MAX_SENSORS_ENV = "TRAFFIC_MAX_SENSORS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    stale_threshold_seconds: float
    reading_initial_capacity: int
    max_readings_per_sensor: Optional[int]
    max_sensors: Optional[int]
    log_level: str


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_optional_limit(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        parsed = int(candidate)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        stale_threshold_seconds=_read_positive_float(_STALE_THRESHOLD_ENV, 3600.0),
        reading_initial_capacity=_read_positive_int(_READING_CAPACITY_ENV, 4),
        max_readings_per_sensor=_read_optional_limit(_MAX_READINGS_ENV),
        max_sensors=_read_optional_limit(_MAX_SENSORS_ENV),
        log_level=_read_log_level("INFO"),
    )
