"""Unit tests for parameter normalization."""

from __future__ import annotations

import pytest

from services.normalizer import DEFAULT_UNIT, normalize_parameter, unit_for


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("MP₁₀", "MP10"),
        ("MP10", "MP10"),
        ("MP₂.₅ (µg/m³)", "MP2.5"),
        ("MP2.5", "MP2.5"),
        ("PM2_5", "MP2.5"),
        ("O₃", "O3"),
        ("SO₂ (µg/m³)", "SO2"),
        ("NOx", "NOx"),
        ("wind_speed", "wind_speed"),
    ],
)
def test_normalize_parameter_maps_labels(label: str, expected: str) -> None:
    assert normalize_parameter(label) == expected


@pytest.mark.parametrize(
    "label",
    ["MP₁₀", "MP₂.₅ (µg/m³)", "CO (mg/m³)", "Umidade relativa", "", "HCT", "X₉₈ y"],
)
def test_normalize_parameter_is_idempotent(label: str) -> None:
    once = normalize_parameter(label)

    assert normalize_parameter(once) == once


def test_unit_lookup_uses_canonical_key_and_default() -> None:
    assert unit_for("NOx") == "ppb"
    assert unit_for("CO") == "mg/m³"
    assert unit_for("MP₂.₅") == "µg/m³"
    assert unit_for("Temperatura") == DEFAULT_UNIT
