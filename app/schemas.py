"""Pydantic schemas for derived views and the HTTP API layer."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RowStatus(str, Enum):
    """Consistency status of a reading or an aggregated bucket."""

    valid = "valid"
    invalid = "invalid"
    pending = "pending"


class Period(str, Enum):
    """Named look-back windows accepted by the consistency query."""

    last_24h = "Last 24h"
    last_7d = "Last 7d"
    last_30d = "Last 30d"
    last_90d = "Last 90d"

    @property
    def hours(self) -> int:
        return _PERIOD_HOURS[self]

    @classmethod
    def parse(cls, label: str) -> "Period":
        """Resolve an English or Portuguese period label."""
        candidate = label.strip()
        alias = _PERIOD_ALIASES.get(candidate)
        if alias is not None:
            return alias
        return cls(candidate)


_PERIOD_HOURS = {
    Period.last_24h: 24,
    Period.last_7d: 168,
    Period.last_30d: 720,
    Period.last_90d: 2160,
}

_PERIOD_ALIASES = {
    "Últimas 24 horas": Period.last_24h,
    "Últimos 7 dias": Period.last_7d,
    "Últimos 30 dias": Period.last_30d,
    "Últimos 90 dias": Period.last_90d,
}


class Granularity(str, Enum):
    one_minute = "1min"
    fifteen_minutes = "15min"
    one_hour = "1h"
    one_day = "24h"

    @property
    def minutes(self) -> int:
        return _GRANULARITY_MINUTES[self]


_GRANULARITY_MINUTES = {
    Granularity.one_minute: 1,
    Granularity.fifteen_minutes: 15,
    Granularity.one_hour: 60,
    Granularity.one_day: 1440,
}


class ParameterLevel(str, Enum):
    normal = "normal"
    alert = "alert"
    critical = "critical"


class StationLevel(str, Enum):
    """Coarse three-band status used on the station map."""

    good = "good"
    moderate = "moderate"
    critical = "critical"


class ClassifiedRow(BaseModel):
    """A reading reconciled with its validation decision, ready for display.

    Aggregated buckets reuse this shape with averaged values.
    """

    id: int = Field(..., ge=1, description="1-based position in the sequence.")
    date_time: str = Field(..., description="Local time as DD/MM/YYYY HH:MM.")
    raw_value: str
    final_value: str
    unit: str
    status: RowStatus
    justification: str = "-"
    operator: str = "Sistema"
    parameter: Optional[str] = None
    raw_data_id: Optional[str] = None
    raw_data_ids: List[str] = Field(default_factory=list)


class WindSample(BaseModel):
    direction: str
    velocity: float


class PollutantSample(BaseModel):
    direction: str
    concentration: int


class IndexBand(BaseModel):
    quality: str
    color: str


class AirQualityIndex(BaseModel):
    value: int
    quality: str
    color: str


class StationIndexBand(BaseModel):
    label: str
    status: StationLevel


class ParameterStatus(BaseModel):
    parameter: str
    name: str
    value: str
    unit: str
    status: ParameterLevel


class TimelinePoint(BaseModel):
    time: str
    value: int
    invalidated: bool = False


class DashboardData(BaseModel):
    """Everything the station dashboard shows for one day."""

    availability: float = 0
    index: AirQualityIndex
    wind_series: List[WindSample]
    pollutant_series: List[PollutantSample]
    parameter_statuses: List[ParameterStatus] = Field(default_factory=list)
    hourly_timeline: List[TimelinePoint]


class StationParameter(BaseModel):
    name: str
    value: float
    unit: str
    status: ParameterLevel


class StationOverview(BaseModel):
    """Summary card for one station on the map view."""

    id: str
    code: str
    name: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    unit: str
    status: StationLevel
    index: int
    index_label: str
    pm10: int = 0
    wind: str = "N"
    wind_speed: int = 0
    wind_direction: int = 0
    last_update: Optional[str] = None
    parameters: List[StationParameter] = Field(default_factory=list)
    trend: List[int] = Field(default_factory=list)


class StationUnits(BaseModel):
    units: Dict[str, List[str]] = Field(default_factory=dict)


class RoseData(BaseModel):
    wind_series: List[WindSample]
    pollutant_series: List[PollutantSample]


class ParameterClassification(BaseModel):
    parameter: str
    value: float
    status: ParameterLevel
