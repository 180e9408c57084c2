"""Station listings and the map overview cards."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Dict, List, Optional, Sequence

from app.schemas import StationOverview, StationParameter
from datastore.base import ReadingStore
from datastore.errors import StoreError
from datastore.memory_store import build_default_store
from models.records import Sensor, Station
from services.classifier import classify_index_status, classify_parameter
from services.directional import compass_label
from services.normalizer import SHORT_LABELS, WIND_DIRECTION, WIND_SPEED, unit_for
from services.timeframes import local_zone, round_half_up
from settings import get_settings

logger = logging.getLogger(__name__)

ACTIVE = "active"
TREND_LENGTH = 6
LAST_UPDATE_FORMAT = "%d/%m/%Y %H:%M:%S"


class StationsService:
    def __init__(
        self,
        store: ReadingStore,
        timezone: str = "America/Sao_Paulo",
        fail_soft: bool = True,
    ) -> None:
        self.store = store
        self.zone = local_zone(timezone)
        self.fail_soft = fail_soft

    async def list_station_names(self, unit: Optional[str] = None) -> List[str]:
        """Names of active stations, optionally limited to one unit."""
        stations = await self._active_stations(unit)
        return [station.name for station in stations]

    async def stations_by_unit(self, units: Optional[Sequence[str]] = None) -> Dict[str, List[str]]:
        try:
            stations = await self.store.list_stations()
        except StoreError:
            logger.exception("Store failure while listing stations")
            if not self.fail_soft:
                raise
            return {}

        grouped: Dict[str, List[str]] = {}
        for station in sorted(stations, key=lambda s: (s.unit, s.name)):
            if units is not None and station.unit not in units:
                continue
            grouped.setdefault(station.unit, []).append(station.name)
        return grouped

    async def station_overview(self, unit: Optional[str] = None) -> List[StationOverview]:
        """Map cards for every active station, skipping any that fail to load."""
        cards: List[StationOverview] = []
        for station in await self._active_stations(unit):
            try:
                cards.append(await self._overview(station))
            except StoreError:
                logger.exception(
                    "Store failure while summarising station",
                    extra={"station": station.name},
                )
                if not self.fail_soft:
                    raise
        return cards

    async def _active_stations(self, unit: Optional[str]) -> List[Station]:
        try:
            stations = await self.store.list_stations(unit)
        except StoreError:
            logger.exception("Store failure while listing stations")
            if not self.fail_soft:
                raise
            return []
        return [station for station in stations if station.status == ACTIVE]

    async def _overview(self, station: Station) -> StationOverview:
        history, sensors = await asyncio.gather(
            self.store.query_index_history(station.id, TREND_LENGTH),
            self.store.list_sensors(station.id),
        )
        latest_index = history[0] if history else None
        index_value = latest_index.value if latest_index else 0
        band = classify_index_status(index_value)

        latest = await self._latest_values(sensors)
        parameters = [
            StationParameter(
                name=label,
                value=round_half_up(latest[key], 2),
                unit=unit_for(key),
                status=classify_parameter(key, latest[key]),
            )
            for key, label in SHORT_LABELS.items()
            if key in latest
        ]
        wind_direction = int(round_half_up(latest.get(WIND_DIRECTION, 0)))

        return StationOverview(
            id=station.id,
            code=station.code,
            name=station.name,
            lat=station.lat,
            lng=station.lng,
            unit=station.unit,
            status=band.status,
            index=int(round_half_up(index_value)),
            index_label=band.label,
            pm10=int(round_half_up(latest.get("MP10", 0))),
            wind=compass_label(wind_direction),
            wind_speed=int(round_half_up(latest.get(WIND_SPEED, 0))),
            wind_direction=wind_direction,
            last_update=(
                latest_index.timestamp.astimezone(self.zone).strftime(LAST_UPDATE_FORMAT)
                if latest_index
                else None
            ),
            parameters=parameters,
            trend=[int(round_half_up(result.value)) for result in reversed(history)],
        )

    async def _latest_values(self, sensors: Sequence[Sensor]) -> Dict[str, float]:
        wanted = [s for s in sensors if s.parameter in SHORT_LABELS or s.parameter in (WIND_SPEED, WIND_DIRECTION)]
        readings = await asyncio.gather(
            *(self.store.query_latest_reading(sensor.id) for sensor in wanted)
        )
        return {
            sensor.parameter: reading.value
            for sensor, reading in zip(wanted, readings)
            if reading is not None
        }


@lru_cache
def build_default_stations() -> StationsService:
    settings = get_settings()
    return StationsService(
        store=build_default_store(),
        timezone=settings.timezone,
        fail_soft=settings.fail_soft,
    )
