"""Canonical parameter keys and their display metadata."""

from __future__ import annotations

from typing import Dict

_SUBSCRIPT_DIGITS = str.maketrans("₀₁₂₃₄₅₆₇₈₉", "0123456789")

DEFAULT_UNIT = "µg/m³"

PARAMETER_UNITS: Dict[str, str] = {
    "O3": "µg/m³",
    "NOx": "ppb",
    "SO2": "µg/m³",
    "CO": "mg/m³",
    "HCT": "µg/m³",
    "BTEX": "µg/m³",
    "MP10": "µg/m³",
    "MP2.5": "µg/m³",
}

SHORT_LABELS: Dict[str, str] = {
    "O3": "O₃",
    "NOx": "NOx",
    "SO2": "SO₂",
    "CO": "CO",
    "HCT": "HCT",
    "BTEX": "BTEX",
    "MP10": "MP₁₀",
    "MP2.5": "MP₂.₅",
}

# Dashboard order matters: parameter statuses are listed in this order.
DASHBOARD_LABELS: Dict[str, tuple[str, str]] = {
    "O3": ("Ozônio (O₃)", "µg/m³"),
    "MP2.5": ("Material Particulado (PM2.5)", "µg/m³"),
    "MP10": ("Material Particulado (PM10)", "µg/m³"),
    "NOx": ("Dióxido de Nitrogênio (NO₂)", "µg/m³"),
    "CO": ("Monóxido de Carbono (CO)", "mg/m³"),
    "SO2": ("Dióxido de Enxofre (SO₂)", "µg/m³"),
}

WIND_DIRECTION = "wind_direction"
WIND_SPEED = "wind_speed"


def normalize_parameter(parameter: str) -> str:
    """Map a free-form parameter label such as ``"MP₂.₅ (µg/m³)"`` to its key.

    Unknown labels are returned with subscripts replaced and any suffix
    after the first space removed.
    """
    key = parameter.translate(_SUBSCRIPT_DIGITS).split(" ")[0]

    if key.startswith("MP1"):
        return "MP10"
    if key.startswith("MP2") or "2.5" in key or "2_5" in key:
        return "MP2.5"
    if key == "O3":
        return "O3"
    if key == "SO2":
        return "SO2"
    return key


def unit_for(parameter: str) -> str:
    return PARAMETER_UNITS.get(normalize_parameter(parameter), DEFAULT_UNIT)
