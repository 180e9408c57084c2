"""Unit tests for index bands and parameter alert levels."""

from __future__ import annotations

import pytest

from app.schemas import ParameterLevel, StationLevel
from services.classifier import classify_index, classify_index_status, classify_parameter


@pytest.mark.parametrize(
    ("value", "quality", "color"),
    [
        (0, "BOA", "green"),
        (50, "BOA", "green"),
        (51, "MODERADA", "yellow"),
        (100, "MODERADA", "yellow"),
        (150, "RUIM", "orange"),
        (200, "MUITO RUIM", "red"),
        (201, "PÉSSIMA", "purple"),
    ],
)
def test_classify_index_boundaries(value: int, quality: str, color: str) -> None:
    band = classify_index(value)

    assert (band.quality, band.color) == (quality, color)


@pytest.mark.parametrize(
    ("value", "label", "status"),
    [
        (50, "BOA", StationLevel.good),
        (100, "MODERADA", StationLevel.moderate),
        (101, "RUIM", StationLevel.critical),
        (350, "RUIM", StationLevel.critical),
    ],
)
def test_classify_index_status_uses_three_bands(value: int, label: str, status: StationLevel) -> None:
    band = classify_index_status(value)

    assert band.label == label
    assert band.status is status


@pytest.mark.parametrize(
    ("parameter", "value", "expected"),
    [
        ("CO", 2.9, ParameterLevel.normal),
        ("CO", 3.0, ParameterLevel.alert),
        ("CO", 9.0, ParameterLevel.critical),
        ("MP2.5", 49.9, ParameterLevel.normal),
        ("MP₂.₅", 50, ParameterLevel.alert),
        ("NOx", 300, ParameterLevel.critical),
        ("O3", 199.9, ParameterLevel.alert),
    ],
)
def test_classify_parameter_thresholds(parameter: str, value: float, expected: ParameterLevel) -> None:
    assert classify_parameter(parameter, value) is expected


def test_unknown_parameter_is_always_normal() -> None:
    assert classify_parameter("HCT", 10_000) is ParameterLevel.normal
    assert classify_parameter("wind_speed", 99) is ParameterLevel.normal
