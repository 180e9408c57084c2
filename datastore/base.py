"""Contract every reading store adapter fulfils."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Protocol

from models.records import IndexResult, RawReading, Sensor, Station, ValidationDecision


class ReadingStore(Protocol):
    """Asynchronous read access to stations, readings and decisions.

    Time ranges are half-open ``[start, end)`` and compared against aware
    timestamps. Adapters raise :class:`datastore.errors.StoreError` on I/O
    failure and return ``None`` or empty collections when nothing matches.
    """

    async def find_station_by_name(self, name: str) -> Optional[Station]: ...

    async def list_stations(self, unit: Optional[str] = None) -> List[Station]: ...

    async def find_sensor(self, station_id: str, parameter: str) -> Optional[Sensor]: ...

    async def list_sensors(self, station_id: str) -> List[Sensor]: ...

    async def query_readings(
        self,
        sensor_id: str,
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> List[RawReading]:
        """Readings for one sensor ordered by ascending timestamp."""
        ...

    async def query_latest_reading(self, sensor_id: str) -> Optional[RawReading]: ...

    async def query_decisions(
        self, raw_reading_ids: Iterable[str]
    ) -> Dict[str, ValidationDecision]: ...

    async def query_latest_index_value(
        self, station_id: str, start: datetime, end: datetime
    ) -> Optional[float]: ...

    async def query_index_history(self, station_id: str, limit: int) -> List[IndexResult]: ...

    async def query_availability_percentage(
        self, station_id: str, day: date
    ) -> Optional[float]: ...
