"""Air quality index bands and per-parameter alert levels."""

from __future__ import annotations

from typing import Dict, NamedTuple

from app.schemas import IndexBand, ParameterLevel, StationIndexBand, StationLevel
from services.normalizer import normalize_parameter


class Thresholds(NamedTuple):
    alert: float
    critical: float


PARAMETER_THRESHOLDS: Dict[str, Thresholds] = {
    "O3": Thresholds(alert=100, critical=200),
    "MP2.5": Thresholds(alert=50, critical=100),
    "MP10": Thresholds(alert=100, critical=200),
    "NOx": Thresholds(alert=150, critical=300),
    "CO": Thresholds(alert=3, critical=9),
    "SO2": Thresholds(alert=100, critical=200),
}

# Inclusive upper bounds; anything above the last bound is PÉSSIMA.
_INDEX_BANDS = (
    (50, "BOA", "green"),
    (100, "MODERADA", "yellow"),
    (150, "RUIM", "orange"),
    (200, "MUITO RUIM", "red"),
)

UNAVAILABLE_BAND = IndexBand(quality="N/A", color="gray")


def classify_index(value: float) -> IndexBand:
    """Five-band quality used by the station dashboard."""
    for upper, quality, color in _INDEX_BANDS:
        if value <= upper:
            return IndexBand(quality=quality, color=color)
    return IndexBand(quality="PÉSSIMA", color="purple")


def classify_index_status(value: float) -> StationIndexBand:
    """Three-band status used on the station map."""
    if value <= 50:
        return StationIndexBand(label="BOA", status=StationLevel.good)
    if value <= 100:
        return StationIndexBand(label="MODERADA", status=StationLevel.moderate)
    return StationIndexBand(label="RUIM", status=StationLevel.critical)


def classify_parameter(parameter: str, value: float) -> ParameterLevel:
    thresholds = PARAMETER_THRESHOLDS.get(normalize_parameter(parameter))
    if thresholds is None:
        return ParameterLevel.normal
    if value >= thresholds.critical:
        return ParameterLevel.critical
    if value >= thresholds.alert:
        return ParameterLevel.alert
    return ParameterLevel.normal
