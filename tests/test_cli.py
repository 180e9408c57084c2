from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.config import DEFAULT_BASE_URL, load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.consistency_calls: List[Dict[str, Any]] = []
        self.dashboard_calls: List[tuple[str, Optional[str]]] = []
        self.rows: List[Dict[str, Any]] = [
            {
                "id": 1,
                "date_time": "10/06/2024 09:00",
                "raw_value": "10.0",
                "final_value": "10.0",
                "unit": "µg/m³",
                "status": "valid",
                "justification": "-",
                "operator": "Sistema",
            },
            {
                "id": 2,
                "date_time": "10/06/2024 09:01",
                "raw_value": "90.0",
                "final_value": "-",
                "unit": "µg/m³",
                "status": "invalid",
                "justification": "Outlier",
                "operator": "analyst-1",
            },
        ]
        self.dashboard_payload: Dict[str, Any] = {
            "availability": 97.5,
            "index": {"value": 64, "quality": "MODERADA", "color": "yellow"},
            "wind_series": [{"direction": "N", "velocity": 1.5}],
            "pollutant_series": [{"direction": "N", "concentration": 40}],
            "parameter_statuses": [
                {
                    "parameter": "MP10",
                    "name": "Material Particulado (PM10)",
                    "value": "120",
                    "unit": "µg/m³",
                    "status": "alert",
                }
            ],
            "hourly_timeline": [
                {"time": "00h", "value": 12, "invalidated": False},
                {"time": "01h", "value": 0, "invalidated": True},
            ],
        }
        self.closed = False

    def list_stations(self, unit: Optional[str] = None) -> List[str]:
        return ["Estação Centro"] if unit in (None, "Unidade SP") else []

    def get_consistency(self, station: str, parameter: str, **kwargs: Any) -> List[Dict[str, Any]]:
        self.consistency_calls.append({"station": station, "parameter": parameter, **kwargs})
        return self.rows

    def get_dashboard(self, station: str, day: Optional[str] = None) -> Dict[str, Any]:
        self.dashboard_calls.append((station, day))
        return self.dashboard_payload

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    client = StubClient(config=None)

    def factory(config):
        client.config = config
        return client

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return client


def test_stations_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["stations"])

    assert result.exit_code == 0
    assert "Estação Centro" in result.stdout
    assert stub.closed is True

    empty = runner.invoke(app, ["stations", "--unit", "Unidade RJ"])
    assert "No active stations." in empty.stdout


def test_consistency_defaults_to_last_day(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["consistency", "Estação Centro", "MP10"])

    assert result.exit_code == 0
    assert stub.consistency_calls == [
        {
            "station": "Estação Centro",
            "parameter": "MP10",
            "period": "Last 24h",
            "start": None,
            "end": None,
            "granularity": "1min",
        }
    ]
    assert "Outlier" in result.stdout
    assert "2 rows" in result.stdout


def test_consistency_range_and_granularity(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(
        app,
        [
            "consistency",
            "Estação Centro",
            "MP10",
            "--start",
            "2024-06-10T00:00:00",
            "--end",
            "2024-06-11T00:00:00",
            "-g",
            "1h",
        ],
    )

    assert result.exit_code == 0
    call = stub.consistency_calls[0]
    assert call["period"] is None
    assert call["start"] == "2024-06-10T00:00:00"
    assert call["granularity"] == "1h"


@pytest.mark.parametrize(
    "extra",
    [
        ["--granularity", "5min"],
        ["--start", "2024-06-10T00:00:00"],
    ],
)
def test_consistency_rejects_bad_options(runner: CliRunner, stub: StubClient, extra: List[str]) -> None:
    result = runner.invoke(app, ["consistency", "Estação Centro", "MP10", *extra])

    assert result.exit_code == 2
    assert stub.consistency_calls == []


def test_dashboard_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://aq.local/", "dashboard", "Estação Centro", "-d", "2024-06-10"])

    assert result.exit_code == 0
    assert stub.config.base_url == "http://aq.local"
    assert stub.dashboard_calls == [("Estação Centro", "2024-06-10")]
    assert "availability: 97.5%" in result.stdout
    assert "index: 64 MODERADA (yellow)" in result.stdout
    assert "01h: 0 (invalidated)" in result.stdout


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env.local/")
    monkeypatch.setenv("CLI_TIMEOUT", "-1")

    config = load_config()

    assert config.base_url == "http://env.local"
    assert config.timeout == 30.0

    monkeypatch.delenv("API_BASE_URL")
    assert load_config().base_url == DEFAULT_BASE_URL
