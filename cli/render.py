from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

import typer

_STATUS_COLORS = {
    "valid": typer.colors.GREEN,
    "invalid": typer.colors.RED,
    "pending": typer.colors.YELLOW,
    "normal": typer.colors.GREEN,
    "alert": typer.colors.YELLOW,
    "critical": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _echo_series(items: Sequence[Dict[str, Any]], value_key: str) -> None:
    typer.echo("  " + "  ".join(f"{item.get('direction')}={item.get(value_key)}" for item in items))


def render_consistency(rows: List[Dict[str, Any]]) -> None:
    echo_heading("Consistency")
    if not rows:
        typer.echo("No readings found.")
        return
    for row in rows:
        status = row.get("status", "")
        line = (
            f"{row.get('id'):>4}  {row.get('date_time')}  "
            f"{row.get('raw_value'):>8} -> {row.get('final_value'):>8} {row.get('unit')}  "
        )
        typer.echo(line, nl=False)
        typer.secho(f"{status:<8}", fg=_STATUS_COLORS.get(status), nl=False)
        typer.echo(f"  {row.get('operator')}  {row.get('justification')}")
    typer.echo()
    typer.echo(f"{len(rows)} rows")


def render_dashboard(payload: Dict[str, Any]) -> None:
    index = payload.get("index") or {}
    echo_heading("Dashboard")
    echo_key_values(
        [
            ("availability", f"{payload.get('availability')}%"),
            ("index", f"{index.get('value')} {index.get('quality')} ({index.get('color')})"),
        ]
    )

    typer.echo()
    echo_heading("Wind (velocity by direction)")
    _echo_series(payload.get("wind_series") or [], "velocity")
    echo_heading("Pollutant (concentration by direction)")
    _echo_series(payload.get("pollutant_series") or [], "concentration")

    typer.echo()
    echo_heading("Parameters")
    statuses = payload.get("parameter_statuses") or []
    if statuses:
        for item in statuses:
            typer.echo(f"  - {item.get('name')}: {item.get('value')} {item.get('unit')} ", nl=False)
            status = item.get("status", "")
            typer.secho(status, fg=_STATUS_COLORS.get(status))
    else:
        typer.echo("No parameter readings.")

    typer.echo()
    echo_heading("Hourly timeline")
    for point in payload.get("hourly_timeline") or []:
        marker = " (invalidated)" if point.get("invalidated") else ""
        typer.echo(f"  {point.get('time')}: {point.get('value')}{marker}")


def render_station_list(names: List[str]) -> None:
    echo_heading("Stations")
    if not names:
        typer.echo("No active stations.")
        return
    for name in names:
        typer.echo(f"  - {name}")
