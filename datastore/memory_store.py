from __future__ import annotations

import json
from bisect import bisect_left, insort
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from datastore.errors import StoreError
from models.records import (
    AvailabilityMetric,
    IndexResult,
    RawReading,
    Sensor,
    Station,
    ValidationDecision,
)
from settings import get_settings


class StoreSnapshot(BaseModel):
    """On-disk layout of the in-memory store."""

    stations: List[Station] = Field(default_factory=list)
    sensors: List[Sensor] = Field(default_factory=list)
    readings: List[RawReading] = Field(default_factory=list)
    decisions: List[ValidationDecision] = Field(default_factory=list)
    index_results: List[IndexResult] = Field(default_factory=list)
    availability: List[AvailabilityMetric] = Field(default_factory=list)


@dataclass
class _Tables:
    stations: Dict[str, Station]
    sensors: Dict[str, Sensor]
    readings: Dict[str, List[RawReading]]
    decisions: Dict[str, ValidationDecision]
    index_results: Dict[str, List[IndexResult]]
    availability: Dict[tuple[str, date], float]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class InMemoryReadingStore:
    """Reading store held in process memory, optionally mirrored to JSON.

    The ``add_*``/``put_*`` methods stand in for ingestion and the analyst
    tooling; the services only ever call the async query methods.

    Records are copied on the way in and on the way out, so callers never
    share objects with the store. A write that cannot be mirrored to disk
    is rolled back before ``StoreError`` is raised.
    """

    def __init__(self, name: str = "readings", persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self.persistence_path = persistence_path
        self._stations: Dict[str, Station] = {}
        self._sensors: Dict[str, Sensor] = {}
        self._readings: Dict[str, List[RawReading]] = {}
        self._decisions: Dict[str, ValidationDecision] = {}
        self._index_results: Dict[str, List[IndexResult]] = {}
        self._availability: Dict[tuple[str, date], float] = {}
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def add_station(self, station: Station) -> None:
        stored = replace(station)
        self._write(lambda: self._stations.__setitem__(stored.id, stored))

    def add_sensor(self, sensor: Sensor) -> None:
        stored = replace(sensor)
        self._write(lambda: self._sensors.__setitem__(stored.id, stored))

    def add_readings(self, readings: Iterable[RawReading]) -> None:
        batch = list(readings)

        def insert_all() -> None:
            for reading in batch:
                self._insert_reading(reading)

        self._write(insert_all)

    def add_reading(self, reading: RawReading) -> None:
        self.add_readings([reading])

    def put_decision(self, decision: ValidationDecision) -> None:
        """Record a decision; an older decision never replaces a newer one."""
        self._write(lambda: self._insert_decision(decision))

    def put_index_result(self, result: IndexResult) -> None:
        self._write(lambda: self._insert_index_result(result))

    def put_availability(self, metric: AvailabilityMetric) -> None:
        key = (metric.station_id, metric.day)
        self._write(lambda: self._availability.__setitem__(key, metric.percentage))

    async def find_station_by_name(self, name: str) -> Optional[Station]:
        with self._lock:
            for station in self._stations.values():
                if station.name == name:
                    return replace(station)
        return None

    async def list_stations(self, unit: Optional[str] = None) -> List[Station]:
        with self._lock:
            stations = [
                replace(station)
                for station in self._stations.values()
                if unit is None or station.unit == unit
            ]
        return sorted(stations, key=lambda station: station.name)

    async def find_sensor(self, station_id: str, parameter: str) -> Optional[Sensor]:
        with self._lock:
            for sensor in self._sensors.values():
                if sensor.station_id == station_id and sensor.parameter == parameter:
                    return replace(sensor)
        return None

    async def list_sensors(self, station_id: str) -> List[Sensor]:
        with self._lock:
            sensors = [replace(s) for s in self._sensors.values() if s.station_id == station_id]
        return sorted(sensors, key=lambda sensor: sensor.parameter)

    async def query_readings(
        self,
        sensor_id: str,
        start: datetime,
        end: datetime,
        limit: Optional[int] = None,
    ) -> List[RawReading]:
        lower = _as_utc(start)
        upper = _as_utc(end)
        with self._lock:
            series = self._readings.get(sensor_id, [])
            begin = bisect_left(series, lower, key=lambda item: item.timestamp)
            stop = bisect_left(series, upper, key=lambda item: item.timestamp)
            if limit is not None:
                stop = min(stop, begin + max(limit, 0))
            return [replace(reading) for reading in series[begin:stop]]

    async def query_latest_reading(self, sensor_id: str) -> Optional[RawReading]:
        with self._lock:
            series = self._readings.get(sensor_id)
            return replace(series[-1]) if series else None

    async def query_decisions(
        self, raw_reading_ids: Iterable[str]
    ) -> Dict[str, ValidationDecision]:
        with self._lock:
            return {
                raw_id: replace(self._decisions[raw_id])
                for raw_id in set(raw_reading_ids)
                if raw_id in self._decisions
            }

    async def query_latest_index_value(
        self, station_id: str, start: datetime, end: datetime
    ) -> Optional[float]:
        lower = _as_utc(start)
        upper = _as_utc(end)
        with self._lock:
            results = list(self._index_results.get(station_id, []))
        for result in reversed(results):
            if lower <= result.timestamp < upper:
                return result.value
        return None

    async def query_index_history(self, station_id: str, limit: int) -> List[IndexResult]:
        """Most recent index results, newest first."""
        if limit <= 0:
            return []
        with self._lock:
            results = self._index_results.get(station_id, [])
            return [replace(result) for result in reversed(results[-limit:])]

    async def query_availability_percentage(
        self, station_id: str, day: date
    ) -> Optional[float]:
        with self._lock:
            return self._availability.get((station_id, day))

    def _write(self, change: Callable[[], None]) -> None:
        with self._lock:
            saved = self._tables() if self.persistence_path else None
            change()
            try:
                self._persist()
            except StoreError:
                if saved is not None:
                    self._restore(saved)
                raise

    def _tables(self) -> _Tables:
        return _Tables(
            stations=dict(self._stations),
            sensors=dict(self._sensors),
            readings={key: list(series) for key, series in self._readings.items()},
            decisions=dict(self._decisions),
            index_results={key: list(series) for key, series in self._index_results.items()},
            availability=dict(self._availability),
        )

    def _restore(self, tables: _Tables) -> None:
        self._stations = tables.stations
        self._sensors = tables.sensors
        self._readings = tables.readings
        self._decisions = tables.decisions
        self._index_results = tables.index_results
        self._availability = tables.availability

    def _insert_reading(self, reading: RawReading) -> None:
        insort(
            self._readings.setdefault(reading.sensor_id, []),
            replace(reading, timestamp=_as_utc(reading.timestamp)),
            key=lambda item: item.timestamp,
        )

    def _insert_decision(self, decision: ValidationDecision) -> None:
        stored = replace(decision, created_at=_as_utc(decision.created_at))
        current = self._decisions.get(stored.raw_reading_id)
        if current is not None and current.created_at > stored.created_at:
            return
        self._decisions[stored.raw_reading_id] = stored

    def _insert_index_result(self, result: IndexResult) -> None:
        insort(
            self._index_results.setdefault(result.station_id, []),
            replace(result, timestamp=_as_utc(result.timestamp)),
            key=lambda item: item.timestamp,
        )

    def _snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            stations=list(self._stations.values()),
            sensors=list(self._sensors.values()),
            readings=[r for series in self._readings.values() for r in series],
            decisions=list(self._decisions.values()),
            index_results=[r for series in self._index_results.values() for r in series],
            availability=[
                AvailabilityMetric(station_id=station_id, day=day, percentage=percentage)
                for (station_id, day), percentage in self._availability.items()
            ],
        )

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = self._snapshot().model_dump(mode="json")
        try:
            self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))
        except OSError as exc:
            raise StoreError(f"Could not persist store {self.name!r}: {exc}") from exc

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            snapshot = StoreSnapshot.model_validate(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError):
            snapshot = StoreSnapshot()

        for station in snapshot.stations:
            self._stations[station.id] = station
        for sensor in snapshot.sensors:
            self._sensors[sensor.id] = sensor
        for reading in snapshot.readings:
            self._insert_reading(reading)
        for decision in snapshot.decisions:
            self._insert_decision(decision)
        for result in snapshot.index_results:
            self._insert_index_result(result)
        for metric in snapshot.availability:
            self._availability[(metric.station_id, metric.day)] = metric.percentage


@lru_cache
def build_default_store(path: Optional[str] = None) -> InMemoryReadingStore:
    settings = get_settings()
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return InMemoryReadingStore(persistence_path=persistence)
