"""Tests for station listings and map overview cards."""

from __future__ import annotations

import asyncio

import pytest

from app.schemas import ParameterLevel, StationLevel
from datastore.errors import StoreUnavailableError
from datastore.memory_store import InMemoryReadingStore
from models.records import Station
from services.stations import StationsService
from tests.builders import STATION_NAME, index_result, reading, station_store, utc


@pytest.fixture()
def store() -> InMemoryReadingStore:
    store = station_store(parameters=("MP10", "CO", "wind_direction", "wind_speed"))
    station_store(parameters=("MP10",), station_id="st-2", name="Estação Anchieta", store=store)
    station_store(parameters=(), station_id="st-3", name="Estação Norte", unit="Unidade RJ", store=store)
    store.add_station(Station(id="st-4", name="Estação Antiga", unit="Unidade SP", status="inactive"))

    for hour, value in ((10, 30.2), (11, 60.0), (12, 80.4)):
        store.put_index_result(index_result(value, utc(10, hour)))
    store.add_readings(
        [
            reading("mp-1", 90.0, utc(10, 11)),
            reading("mp-2", 120.456, utc(10, 12)),
            reading("co-1", 1.234, utc(10, 12), sensor_id="s-co", parameter="CO"),
            reading("wd-1", 92.4, utc(10, 12), sensor_id="s-wd", parameter="wind_direction"),
            reading("ws-1", 3.6, utc(10, 12), sensor_id="s-ws", parameter="wind_speed"),
        ]
    )
    return store


def test_list_station_names_only_returns_active_stations(store: InMemoryReadingStore) -> None:
    service = StationsService(store)

    assert asyncio.run(service.list_station_names()) == [
        "Estação Anchieta",
        "Estação Centro",
        "Estação Norte",
    ]
    assert asyncio.run(service.list_station_names("Unidade RJ")) == ["Estação Norte"]


def test_stations_by_unit_groups_names(store: InMemoryReadingStore) -> None:
    service = StationsService(store)

    grouped = asyncio.run(service.stations_by_unit())
    assert grouped == {
        "Unidade RJ": ["Estação Norte"],
        "Unidade SP": ["Estação Anchieta", "Estação Antiga", "Estação Centro"],
    }
    assert asyncio.run(service.stations_by_unit(["Unidade RJ"])) == {"Unidade RJ": ["Estação Norte"]}


def test_overview_summarises_latest_values(store: InMemoryReadingStore) -> None:
    cards = {card.name: card for card in asyncio.run(StationsService(store).station_overview("Unidade SP"))}

    assert set(cards) == {"Estação Anchieta", STATION_NAME}
    card = cards[STATION_NAME]
    assert card.index == 80
    assert card.index_label == "MODERADA"
    assert card.status is StationLevel.moderate
    assert card.trend == [30, 60, 80]
    assert card.last_update == "10/06/2024 09:00:00"
    assert card.pm10 == 120
    assert card.wind == "L"
    assert card.wind_direction == 92
    assert card.wind_speed == 4
    parameters = {p.name: p for p in card.parameters}
    assert parameters["MP₁₀"].value == 120.46
    assert parameters["MP₁₀"].status is ParameterLevel.alert
    assert parameters["CO"].value == 1.23
    assert parameters["CO"].unit == "mg/m³"


def test_overview_without_history_defaults_to_good(store: InMemoryReadingStore) -> None:
    cards = {card.name: card for card in asyncio.run(StationsService(store).station_overview())}

    north = cards["Estação Norte"]
    assert north.index == 0
    assert north.status is StationLevel.good
    assert north.trend == []
    assert north.last_update is None
    assert north.parameters == []


class _FlakyHistoryStore(InMemoryReadingStore):
    async def query_index_history(self, station_id, limit):
        if station_id == "st-2":
            raise StoreUnavailableError("timeout")
        return await super().query_index_history(station_id, limit)


def test_overview_skips_stations_that_fail_to_load() -> None:
    store = station_store(store=_FlakyHistoryStore())
    station_store(parameters=("MP10",), station_id="st-2", name="Estação Anchieta", store=store)

    cards = asyncio.run(StationsService(store).station_overview())

    assert [card.name for card in cards] == [STATION_NAME]
