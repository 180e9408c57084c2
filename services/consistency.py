"""Reconcile raw readings with analysts' validation decisions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Callable, Iterable, List, Mapping, Optional, Union

from app.schemas import ClassifiedRow, Period, RowStatus
from datastore.base import ReadingStore
from datastore.errors import StoreError
from datastore.memory_store import build_default_store
from models.records import RawReading, ValidationDecision
from services.errors import NotFoundError
from services.normalizer import normalize_parameter, unit_for
from services.timeframes import ensure_aware, format_local, local_zone, utcnow
from settings import get_settings

logger = logging.getLogger(__name__)

INVALID_PLACEHOLDER = "-"
DEFAULT_OPERATOR = "Sistema"


class ConsistencyService:
    """Builds the consistency table for one station and parameter.

    Rows come back ordered by timestamp with 1-based ids. Missing stations
    or sensors and store failures yield an empty list unless ``fail_soft``
    is disabled, in which case the underlying error propagates.
    """

    def __init__(
        self,
        store: ReadingStore,
        timezone: str = "America/Sao_Paulo",
        period_row_limit: int = 500,
        range_row_limit: int = 2000,
        pending_after: Optional[timedelta] = None,
        fail_soft: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.zone = local_zone(timezone)
        self.period_row_limit = period_row_limit
        self.range_row_limit = range_row_limit
        self.pending_after = pending_after
        self.fail_soft = fail_soft
        self.clock = clock

    async def reconcile(
        self,
        station: str,
        parameter: str,
        period: Union[Period, str, None] = None,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ClassifiedRow]:
        """Classify readings for a named period or an explicit ``[start, end)`` range."""
        now = self.clock()
        if period is not None:
            if start is not None or end is not None:
                raise ValueError("Pass either a period or a start/end range, not both.")
            resolved = period if isinstance(period, Period) else Period.parse(period)
            lower = now - timedelta(hours=resolved.hours)
            upper = now
            limit = self.period_row_limit
        else:
            if start is None or end is None:
                raise ValueError("A period or both start and end are required.")
            lower = ensure_aware(start, self.zone)
            upper = ensure_aware(end, self.zone)
            if lower >= upper:
                raise ValueError("Range start must be before its end.")
            limit = self.range_row_limit

        key = normalize_parameter(parameter)
        try:
            readings = await self._fetch_readings(station, key, lower, upper, limit)
            if not readings:
                return []
            decisions = await self.store.query_decisions(r.id for r in readings)
        except NotFoundError as exc:
            logger.warning(
                "No consistency data: %s",
                exc,
                extra={"station": station, "parameter": key, "reason": exc.kind},
            )
            if not self.fail_soft:
                raise
            return []
        except StoreError:
            logger.exception(
                "Store failure while reconciling readings",
                extra={"station": station, "parameter": key},
            )
            if not self.fail_soft:
                raise
            return []

        rows = self.classify(readings, decisions, unit_for(key), now=now)
        logger.debug(
            "Reconciled readings",
            extra={"station": station, "parameter": key, "row_count": len(rows)},
        )
        return rows

    def classify(
        self,
        readings: Iterable[RawReading],
        decisions: Mapping[str, ValidationDecision],
        unit: str,
        now: Optional[datetime] = None,
    ) -> List[ClassifiedRow]:
        """Merge readings with their decisions; pure apart from the clock."""
        pending_cutoff = None
        if self.pending_after is not None:
            pending_cutoff = (now or self.clock()) - self.pending_after

        ordered = sorted(readings, key=lambda reading: reading.timestamp)
        rows: List[ClassifiedRow] = []
        for index, reading in enumerate(ordered, start=1):
            decision = decisions.get(reading.id)
            status = _status_for(reading, decision, pending_cutoff)
            value_text = f"{reading.value:.1f}"
            rows.append(
                ClassifiedRow(
                    id=index,
                    date_time=format_local(reading.timestamp, self.zone),
                    raw_value=value_text,
                    final_value=INVALID_PLACEHOLDER if status is RowStatus.invalid else value_text,
                    unit=unit,
                    status=status,
                    justification=(decision.justification if decision else "") or INVALID_PLACEHOLDER,
                    operator=(decision.operator_id if decision else "") or DEFAULT_OPERATOR,
                    parameter=reading.parameter,
                    raw_data_id=reading.id,
                    raw_data_ids=[reading.id],
                )
            )
        return rows

    async def _fetch_readings(
        self,
        station_name: str,
        parameter: str,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> List[RawReading]:
        station = await self.store.find_station_by_name(station_name)
        if station is None:
            raise NotFoundError("Station", station_name)
        sensor = await self.store.find_sensor(station.id, parameter)
        if sensor is None:
            raise NotFoundError("Sensor", f"{station_name}/{parameter}")
        return await self.store.query_readings(sensor.id, start, end, limit=limit)


def _status_for(
    reading: RawReading,
    decision: Optional[ValidationDecision],
    pending_cutoff: Optional[datetime],
) -> RowStatus:
    if decision is not None:
        return RowStatus.valid if decision.is_valid else RowStatus.invalid
    if pending_cutoff is not None and reading.timestamp >= pending_cutoff:
        return RowStatus.pending
    return RowStatus.valid


@lru_cache
def build_default_consistency() -> ConsistencyService:
    """Factory that wires the consistency service from settings."""
    settings = get_settings()
    pending_after = (
        timedelta(hours=settings.pending_after_hours)
        if settings.pending_after_hours
        else None
    )
    return ConsistencyService(
        store=build_default_store(),
        timezone=settings.timezone,
        period_row_limit=settings.period_row_limit,
        range_row_limit=settings.range_row_limit,
        pending_after=pending_after,
        fail_soft=settings.fail_soft,
    )
