"""Wind-rose and pollutant-rose statistics.

Every wind-direction reading is paired with the nearest-in-time wind-speed
reading and the nearest-in-time pollutant reading. The pairs are then
averaged per 45-degree compass sector. There is no pairing window: any
candidate reading, however distant, is a valid match.
"""

from __future__ import annotations

import asyncio
import logging
import math
from bisect import bisect_left
from datetime import date, datetime
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from app.schemas import PollutantSample, WindSample
from datastore.base import ReadingStore
from datastore.errors import StoreError
from datastore.memory_store import build_default_store
from models.records import RawReading
from services.errors import NotFoundError
from services.normalizer import WIND_DIRECTION, WIND_SPEED, normalize_parameter
from services.timeframes import day_window, local_zone, round_half_up
from settings import get_settings

logger = logging.getLogger(__name__)

COMPASS_LABELS = ("N", "NE", "L", "SE", "S", "SO", "O", "NO")

Rose = Tuple[List[WindSample], List[PollutantSample]]


def compass_bucket(degrees: float) -> int:
    return math.floor(degrees / 45 + 0.5) % len(COMPASS_LABELS)


def compass_label(degrees: float) -> str:
    return COMPASS_LABELS[compass_bucket(degrees)]


class _NearestLookup:
    """Nearest-by-timestamp search over readings sorted by time."""

    def __init__(self, readings: Sequence[RawReading]) -> None:
        ordered = sorted(readings, key=lambda reading: reading.timestamp)
        self._times = [reading.timestamp for reading in ordered]
        self._values = [reading.value for reading in ordered]

    def value_at(self, moment: datetime) -> Optional[float]:
        if not self._times:
            return None
        position = bisect_left(self._times, moment)
        if position == 0:
            return self._values[0]
        if position == len(self._times):
            return self._values[-1]
        before = moment - self._times[position - 1]
        after = self._times[position] - moment
        # Ties go to the earlier reading.
        return self._values[position - 1] if before <= after else self._values[position]


def empty_rose() -> Rose:
    return (
        [WindSample(direction=label, velocity=0) for label in COMPASS_LABELS],
        [PollutantSample(direction=label, concentration=0) for label in COMPASS_LABELS],
    )


def rose_from_readings(
    directions: Sequence[RawReading],
    speeds: Sequence[RawReading],
    pollutants: Sequence[RawReading],
) -> Rose:
    """Average paired speed and pollutant values per compass sector."""
    speed_lookup = _NearestLookup(speeds)
    pollutant_lookup = _NearestLookup(pollutants)
    speed_groups: List[List[float]] = [[] for _ in COMPASS_LABELS]
    pollutant_groups: List[List[float]] = [[] for _ in COMPASS_LABELS]

    skipped = 0
    for reading in directions:
        if not math.isfinite(reading.value):
            skipped += 1
            continue
        bucket = compass_bucket(reading.value)
        speed = speed_lookup.value_at(reading.timestamp)
        if speed is not None:
            speed_groups[bucket].append(speed)
        concentration = pollutant_lookup.value_at(reading.timestamp)
        if concentration is not None:
            pollutant_groups[bucket].append(concentration)

    if skipped:
        logger.warning(
            "Skipped non-finite wind directions",
            extra={"skipped": skipped, "parameter": WIND_DIRECTION},
        )

    wind = [
        WindSample(direction=label, velocity=round_half_up(_mean(values), 1))
        for label, values in zip(COMPASS_LABELS, speed_groups)
    ]
    pollutant = [
        PollutantSample(direction=label, concentration=int(round_half_up(_mean(values))))
        for label, values in zip(COMPASS_LABELS, pollutant_groups)
    ]
    return wind, pollutant


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class DirectionalStatistics:
    """Builds the wind and pollutant roses for a station and local day.

    The three sensor series are fetched concurrently. A missing sensor
    contributes zeros; a missing station yields the all-zero rose.
    """

    def __init__(
        self,
        store: ReadingStore,
        timezone: str = "America/Sao_Paulo",
        pollutant: str = "MP10",
        fail_soft: bool = True,
    ) -> None:
        self.store = store
        self.zone = local_zone(timezone)
        self.pollutant = normalize_parameter(pollutant)
        self.fail_soft = fail_soft

    async def compute(self, station: str, day: date) -> Rose:
        try:
            found = await self.store.find_station_by_name(station)
            if found is None:
                raise NotFoundError("Station", station)
            start, end = day_window(day, self.zone)
            directions, speeds, pollutants = await asyncio.gather(
                self._series(found.id, WIND_DIRECTION, start, end),
                self._series(found.id, WIND_SPEED, start, end),
                self._series(found.id, self.pollutant, start, end),
            )
        except NotFoundError as exc:
            logger.warning("Rose unavailable: %s", exc, extra={"station": station})
            if not self.fail_soft:
                raise
            return empty_rose()
        except StoreError:
            logger.exception("Store failure while building rose", extra={"station": station})
            if not self.fail_soft:
                raise
            return empty_rose()
        return rose_from_readings(directions, speeds, pollutants)

    async def _series(
        self, station_id: str, parameter: str, start: datetime, end: datetime
    ) -> List[RawReading]:
        sensor = await self.store.find_sensor(station_id, parameter)
        if sensor is None:
            logger.info(
                "Sensor missing, rose contribution is zero",
                extra={"parameter": parameter},
            )
            return []
        return await self.store.query_readings(sensor.id, start, end)


@lru_cache
def build_default_directional() -> DirectionalStatistics:
    settings = get_settings()
    return DirectionalStatistics(
        store=build_default_store(),
        timezone=settings.timezone,
        pollutant=settings.rose_pollutant,
        fail_soft=settings.fail_soft,
    )
