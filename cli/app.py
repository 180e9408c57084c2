from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_consistency, render_dashboard, render_station_list

_GRANULARITIES = ("1min", "15min", "1h", "24h")


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Query consistency tables and dashboards from the air quality service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("stations")
def stations_command(
    ctx: typer.Context,
    unit: Optional[str] = typer.Option(None, "--unit", "-u", help="Only stations of this unit."),
) -> None:
    """List active stations."""
    state = _get_state(ctx)
    render_station_list(state.client.list_stations(unit))


@app.command("consistency")
def consistency_command(
    ctx: typer.Context,
    station: str = typer.Argument(..., help="Exact station name."),
    parameter: str = typer.Argument(..., help="Parameter label, e.g. MP10."),
    period: Optional[str] = typer.Option(
        None, "--period", "-p", help="Named window such as 'Last 24h' (default when no range)."
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Range start, ISO 8601."),
    end: Optional[str] = typer.Option(None, "--end", help="Range end, ISO 8601."),
    granularity: str = typer.Option("1min", "--granularity", "-g", help="1min, 15min, 1h or 24h."),
) -> None:
    """Show readings reconciled with validation decisions."""
    if granularity not in _GRANULARITIES:
        raise typer.BadParameter(f"Granularity must be one of {', '.join(_GRANULARITIES)}.")
    if (start is None) != (end is None):
        raise typer.BadParameter("--start and --end must be given together.")
    if start is None and period is None:
        period = "Last 24h"

    state = _get_state(ctx)
    rows = state.client.get_consistency(
        station,
        parameter,
        period=period,
        start=start,
        end=end,
        granularity=granularity,
    )
    render_consistency(rows)


@app.command("dashboard")
def dashboard_command(
    ctx: typer.Context,
    station: str = typer.Argument(..., help="Exact station name."),
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Local date YYYY-MM-DD."),
) -> None:
    """Show the daily dashboard of a station."""
    state = _get_state(ctx)
    render_dashboard(state.client.get_dashboard(station, day))


if __name__ == "__main__":
    app()
