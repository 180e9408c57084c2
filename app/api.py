"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    ClassifiedRow,
    DashboardData,
    Granularity,
    IndexBand,
    ParameterClassification,
    RoseData,
    StationIndexBand,
    StationOverview,
    StationUnits,
)
from datastore.errors import StoreError
from services.aggregator import TemporalAggregator
from services.classifier import classify_index, classify_index_status, classify_parameter
from services.consistency import ConsistencyService, build_default_consistency
from services.dashboard import DashboardService, build_default_dashboard
from services.directional import DirectionalStatistics, build_default_directional
from services.errors import NotFoundError
from services.normalizer import normalize_parameter
from services.stations import StationsService, build_default_stations
from services.timeframes import local_zone
from settings import get_settings

router = APIRouter()


def get_consistency() -> ConsistencyService:
    return build_default_consistency()


def get_dashboard() -> DashboardService:
    return build_default_dashboard()


def get_directional() -> DirectionalStatistics:
    return build_default_directional()


def get_stations() -> StationsService:
    return build_default_stations()


def get_aggregator() -> TemporalAggregator:
    return TemporalAggregator()


def _today() -> date:
    return datetime.now(local_zone(get_settings().timezone)).date()


def _raise_for(exc: Exception) -> NoReturn:
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, StoreError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reading store unavailable.",
        ) from exc
    raise exc


@router.get(
    "/stations",
    response_model=List[str],
    summary="List active station names, optionally for one unit.",
)
async def list_stations(
    unit: Optional[str] = Query(None, description="Restrict to one operating unit."),
    stations: StationsService = Depends(get_stations),
) -> List[str]:
    try:
        return await stations.list_station_names(unit)
    except StoreError as exc:
        _raise_for(exc)


@router.get(
    "/stations/units",
    response_model=StationUnits,
    summary="Station names grouped by operating unit.",
)
async def list_station_units(
    unit: Optional[List[str]] = Query(None, description="Units to include."),
    stations: StationsService = Depends(get_stations),
) -> StationUnits:
    try:
        return StationUnits(units=await stations.stations_by_unit(unit))
    except StoreError as exc:
        _raise_for(exc)


@router.get(
    "/stations/overview",
    response_model=List[StationOverview],
    summary="Map overview cards for active stations.",
)
async def station_overview(
    unit: Optional[str] = Query(None),
    stations: StationsService = Depends(get_stations),
) -> List[StationOverview]:
    try:
        return await stations.station_overview(unit)
    except StoreError as exc:
        _raise_for(exc)


@router.get(
    "/stations/{station}/consistency",
    response_model=List[ClassifiedRow],
    summary="Readings reconciled with validation decisions, optionally aggregated.",
)
async def station_consistency(
    station: str,
    parameter: str = Query(..., description="Parameter label, e.g. MP10 or MP₂.₅."),
    period: Optional[str] = Query(None, description="Named look-back window, e.g. 'Last 24h'."),
    start: Optional[datetime] = Query(None, description="Range start (inclusive)."),
    end: Optional[datetime] = Query(None, description="Range end (exclusive)."),
    granularity: Granularity = Query(Granularity.one_minute),
    consistency: ConsistencyService = Depends(get_consistency),
    aggregator: TemporalAggregator = Depends(get_aggregator),
) -> List[ClassifiedRow]:
    try:
        rows = await consistency.reconcile(station, parameter, period, start=start, end=end)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (NotFoundError, StoreError) as exc:
        _raise_for(exc)
    return aggregator.aggregate(rows, granularity)


@router.get(
    "/stations/{station}/dashboard",
    response_model=DashboardData,
    summary="Daily dashboard for a station.",
)
async def station_dashboard(
    station: str,
    day: Optional[date] = Query(None, alias="date", description="Local date, defaults to today."),
    dashboard: DashboardService = Depends(get_dashboard),
) -> DashboardData:
    try:
        return await dashboard.compute_dashboard(station, day or _today())
    except (NotFoundError, StoreError) as exc:
        _raise_for(exc)


@router.get(
    "/stations/{station}/rose",
    response_model=RoseData,
    summary="Wind and pollutant roses for a station and day.",
)
async def station_rose(
    station: str,
    day: Optional[date] = Query(None, alias="date"),
    directional: DirectionalStatistics = Depends(get_directional),
) -> RoseData:
    try:
        wind, pollutant = await directional.compute(station, day or _today())
    except (NotFoundError, StoreError) as exc:
        _raise_for(exc)
    return RoseData(wind_series=wind, pollutant_series=pollutant)


@router.get("/classify/index", response_model=IndexBand, summary="Five-band index quality.")
async def classify_index_route(value: float = Query(...)) -> IndexBand:
    return classify_index(value)


@router.get(
    "/classify/index-status",
    response_model=StationIndexBand,
    summary="Three-band index status used on the map.",
)
async def classify_index_status_route(value: float = Query(...)) -> StationIndexBand:
    return classify_index_status(value)


@router.get(
    "/classify/parameter",
    response_model=ParameterClassification,
    summary="Alert level of a parameter value.",
)
async def classify_parameter_route(
    parameter: str = Query(...),
    value: float = Query(...),
) -> ParameterClassification:
    return ParameterClassification(
        parameter=normalize_parameter(parameter),
        value=value,
        status=classify_parameter(parameter, value),
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
