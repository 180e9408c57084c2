"""Compose the per-station, per-day dashboard."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import date, datetime
from functools import lru_cache
from typing import Dict, List, Mapping, Sequence

from app.schemas import (
    AirQualityIndex,
    DashboardData,
    ParameterStatus,
    TimelinePoint,
)
from datastore.base import ReadingStore
from datastore.errors import StoreError
from datastore.memory_store import build_default_store
from models.records import RawReading, Sensor, Station, ValidationDecision
from services.classifier import UNAVAILABLE_BAND, classify_index, classify_parameter
from services.directional import empty_rose, rose_from_readings
from services.errors import NotFoundError
from services.normalizer import DASHBOARD_LABELS, WIND_DIRECTION, WIND_SPEED, normalize_parameter
from services.timeframes import day_window, local_zone, round_half_up
from settings import get_settings

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24


def _hour_label(hour: int) -> str:
    return f"{hour:02d}h"


def empty_dashboard() -> DashboardData:
    wind, pollutant = empty_rose()
    return DashboardData(
        availability=0,
        index=AirQualityIndex(value=0, quality=UNAVAILABLE_BAND.quality, color=UNAVAILABLE_BAND.color),
        wind_series=wind,
        pollutant_series=pollutant,
        parameter_statuses=[],
        hourly_timeline=[TimelinePoint(time=_hour_label(hour), value=0) for hour in range(HOURS_PER_DAY)],
    )


class DashboardService:
    def __init__(
        self,
        store: ReadingStore,
        timezone: str = "America/Sao_Paulo",
        rose_pollutant: str = "MP10",
        fail_soft: bool = True,
    ) -> None:
        self.store = store
        self.zone = local_zone(timezone)
        self.rose_pollutant = normalize_parameter(rose_pollutant)
        self.fail_soft = fail_soft

    async def compute_dashboard(self, station: str, day: date) -> DashboardData:
        """Dashboard for ``station`` over the local calendar ``day``.

        A missing station, or a store failure while fail-soft, produces the
        all-zero dashboard with an ``N/A`` index.
        """
        try:
            found = await self.store.find_station_by_name(station)
            if found is None:
                raise NotFoundError("Station", station)
            return await self._compose(found, day)
        except NotFoundError as exc:
            logger.warning("Dashboard unavailable: %s", exc, extra={"station": station})
            if not self.fail_soft:
                raise
        except StoreError:
            logger.exception("Store failure while building dashboard", extra={"station": station})
            if not self.fail_soft:
                raise
        return empty_dashboard()

    async def _compose(self, station: Station, day: date) -> DashboardData:
        start, end = day_window(day, self.zone)
        index_value, availability, sensors = await asyncio.gather(
            self.store.query_latest_index_value(station.id, start, end),
            self.store.query_availability_percentage(station.id, day),
            self.store.list_sensors(station.id),
        )
        readings = await self._readings_by_parameter(sensors, start, end)

        wind, pollutant = rose_from_readings(
            readings.get(WIND_DIRECTION, []),
            readings.get(WIND_SPEED, []),
            readings.get(self.rose_pollutant, []),
        )

        timeline_readings = readings.get(self.rose_pollutant, [])
        decisions = (
            await self.store.query_decisions(r.id for r in timeline_readings)
            if timeline_readings
            else {}
        )

        raw_index = index_value or 0
        band = classify_index(raw_index)
        return DashboardData(
            availability=availability or 0,
            index=AirQualityIndex(
                value=int(round_half_up(raw_index)),
                quality=band.quality,
                color=band.color,
            ),
            wind_series=wind,
            pollutant_series=pollutant,
            parameter_statuses=self._parameter_statuses(readings),
            hourly_timeline=self._hourly_timeline(timeline_readings, decisions),
        )

    async def _readings_by_parameter(
        self, sensors: Sequence[Sensor], start: datetime, end: datetime
    ) -> Dict[str, List[RawReading]]:
        by_parameter: Dict[str, Sensor] = {}
        for sensor in sensors:
            by_parameter.setdefault(sensor.parameter, sensor)
        series = await asyncio.gather(
            *(self.store.query_readings(sensor.id, start, end) for sensor in by_parameter.values())
        )
        return dict(zip(by_parameter.keys(), series))

    def _parameter_statuses(self, readings: Mapping[str, List[RawReading]]) -> List[ParameterStatus]:
        statuses: List[ParameterStatus] = []
        for key, (label, unit) in DASHBOARD_LABELS.items():
            series = readings.get(key)
            if not series:
                continue
            latest = series[-1].value
            display = f"{latest:.1f}" if "mg" in unit else str(int(round_half_up(latest)))
            statuses.append(
                ParameterStatus(
                    parameter=key,
                    name=label,
                    value=display,
                    unit=unit,
                    status=classify_parameter(key, latest),
                )
            )
        return statuses

    def _hourly_timeline(
        self,
        readings: Sequence[RawReading],
        decisions: Mapping[str, ValidationDecision],
    ) -> List[TimelinePoint]:
        kept: Dict[int, List[float]] = defaultdict(list)
        dropped: Dict[int, int] = defaultdict(int)
        for reading in readings:
            hour = reading.timestamp.astimezone(self.zone).hour
            decision = decisions.get(reading.id)
            if decision is not None and not decision.is_valid:
                dropped[hour] += 1
                continue
            kept[hour].append(reading.value)

        timeline: List[TimelinePoint] = []
        for hour in range(HOURS_PER_DAY):
            values = kept.get(hour)
            mean = sum(values) / len(values) if values else 0.0
            timeline.append(
                TimelinePoint(
                    time=_hour_label(hour),
                    value=int(round_half_up(mean)),
                    invalidated=not values and dropped.get(hour, 0) > 0,
                )
            )
        return timeline


@lru_cache
def build_default_dashboard() -> DashboardService:
    settings = get_settings()
    return DashboardService(
        store=build_default_store(),
        timezone=settings.timezone,
        rose_pollutant=settings.rose_pollutant,
        fail_soft=settings.fail_soft,
    )
