"""Store records shared across services.

These mirror the tables the monitoring backend exposes. They are read-only
from the point of view of the services in this package.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(slots=True)
class Station:
    """A physical monitoring station."""

    id: str
    name: str
    code: str = ""
    unit: str = ""
    status: str = "active"
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass(slots=True)
class Sensor:
    """A sensor installed at a station, measuring one parameter."""

    id: str
    station_id: str
    parameter: str


@dataclass(slots=True)
class RawReading:
    """A single timestamped measurement as ingested."""

    id: str
    sensor_id: str
    station_id: str
    parameter: str
    value: float
    timestamp: datetime


@dataclass(slots=True)
class ValidationDecision:
    """An analyst's judgement on one raw reading."""

    raw_reading_id: str
    is_valid: bool
    justification: str
    operator_id: str
    created_at: datetime


@dataclass(slots=True)
class IndexResult:
    station_id: str
    timestamp: datetime
    value: float


@dataclass(slots=True)
class AvailabilityMetric:
    station_id: str
    day: date
    percentage: float
