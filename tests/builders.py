"""Deterministic records for tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from datastore.memory_store import InMemoryReadingStore
from models.records import (
    AvailabilityMetric,
    IndexResult,
    RawReading,
    Sensor,
    Station,
    ValidationDecision,
)

STATION_NAME = "Estação Centro"
STATION_ID = "st-1"


def utc(day: int, hour: int, minute: int = 0, month: int = 6) -> datetime:
    return datetime(2024, month, day, hour, minute, tzinfo=timezone.utc)


def reading(
    reading_id: str,
    value: float,
    timestamp: datetime,
    sensor_id: str = "s-mp10",
    parameter: str = "MP10",
    station_id: str = STATION_ID,
) -> RawReading:
    return RawReading(
        id=reading_id,
        sensor_id=sensor_id,
        station_id=station_id,
        parameter=parameter,
        value=value,
        timestamp=timestamp,
    )


def decision(
    raw_reading_id: str,
    is_valid: bool,
    justification: str = "",
    operator_id: str = "analyst-1",
    created_at: Optional[datetime] = None,
) -> ValidationDecision:
    return ValidationDecision(
        raw_reading_id=raw_reading_id,
        is_valid=is_valid,
        justification=justification,
        operator_id=operator_id,
        created_at=created_at or utc(11, 0),
    )


def station_store(
    parameters: Iterable[str] = ("MP10", "CO", "wind_direction", "wind_speed"),
    station_id: str = STATION_ID,
    name: str = STATION_NAME,
    unit: str = "Unidade SP",
    store: Optional[InMemoryReadingStore] = None,
) -> InMemoryReadingStore:
    """A store holding one active station with one sensor per parameter."""
    store = store or InMemoryReadingStore()
    store.add_station(Station(id=station_id, name=name, code="#1", unit=unit, lat=-23.5, lng=-46.6))
    for parameter in parameters:
        store.add_sensor(Sensor(id=sensor_id_for(parameter, station_id), station_id=station_id, parameter=parameter))
    return store


def sensor_id_for(parameter: str, station_id: str = STATION_ID) -> str:
    suffix = {
        "MP10": "mp10",
        "MP2.5": "mp25",
        "CO": "co",
        "O3": "o3",
        "wind_direction": "wd",
        "wind_speed": "ws",
    }.get(parameter, parameter.lower())
    if station_id == STATION_ID:
        return f"s-{suffix}"
    return f"{station_id}-{suffix}"


def index_result(value: float, timestamp: datetime, station_id: str = STATION_ID) -> IndexResult:
    return IndexResult(station_id=station_id, timestamp=timestamp, value=value)


def availability(percentage: float, day, station_id: str = STATION_ID) -> AvailabilityMetric:
    return AvailabilityMetric(station_id=station_id, day=day, percentage=percentage)
