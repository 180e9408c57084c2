from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the consistency service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def list_stations(self, unit: Optional[str] = None) -> List[str]:
        params = {"unit": unit} if unit else None
        return self._get("/stations", params=params)

    def get_consistency(
        self,
        station: str,
        parameter: str,
        period: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        granularity: str = "1min",
    ) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {"parameter": parameter, "granularity": granularity}
        if period:
            params["period"] = period
        if start:
            params["start"] = start
        if end:
            params["end"] = end
        return self._get(f"/stations/{quote(station, safe='')}/consistency", params=params)

    def get_dashboard(self, station: str, day: Optional[str] = None) -> Dict[str, Any]:
        params = {"date": day} if day else None
        return self._get(f"/stations/{quote(station, safe='')}/dashboard", params=params)

    def _get(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        try:
            response = self._client.get(path, params=params)
            if response.status_code == 404:
                raise typer.BadParameter(self._detail(response) or f"{path} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _detail(response: httpx.Response) -> Optional[str]:
        try:
            data = response.json()
        except ValueError:
            return response.text.strip() or None
        if isinstance(data, dict):
            detail = data.get("detail")
            return detail if isinstance(detail, str) else None
        return None

    @classmethod
    def _handle_http_error(cls, exc: httpx.HTTPStatusError) -> None:
        detail = cls._detail(exc.response)
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
