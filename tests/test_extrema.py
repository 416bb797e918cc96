"""
Test suite for critical point detection.
"""

from decimal import Decimal

import pytest

from bandwatch.errors import InsufficientData
from bandwatch.extrema import alternate_extrema, detect_derivative, detect_extrema, detect_windowed
from bandwatch.models import ExtremumPoint
from conftest import make_candles


def as_tuples(points):
    return [(p.index, p.value, p.kind) for p in points]


def test_windowed_scenario_with_last_candle(scenario_candles):
    """Peak at index 5 and trough at index 6 are found once the newest candle is scanned."""
    points = detect_windowed(scenario_candles, half_width=3, include_last=True)

    assert as_tuples(points) == [
        (0, Decimal(8), "minimum"),
        (5, Decimal(14), "maximum"),
        (6, Decimal(6), "minimum"),
    ]


def test_windowed_skips_forming_candle_by_default(scenario_candles):
    points = detect_extrema(scenario_candles)

    assert all(p.index < len(scenario_candles) - 1 for p in points), "Newest candle should be skipped"
    assert (5, Decimal(14), "maximum") in as_tuples(points)


def test_windowed_clamps_short_window_at_edges():
    """Index 0 only sees its right-hand neighbours."""
    candles = make_candles([9, 8, 7, 6, 5, 4], [1, 2, 3, 4, 5, 6])
    points = detect_windowed(candles, half_width=2)

    assert (0, Decimal(9), "maximum") in as_tuples(points)
    assert (0, Decimal(1), "minimum") in as_tuples(points)
    assert len(points) == 2, "Monotonic series should only flag the first candle"


def test_windowed_detection_is_deterministic(scenario_candles):
    first = detect_extrema(scenario_candles, include_last=True)
    second = detect_extrema(scenario_candles, include_last=True)
    assert first == second, "Repeated detection should return the same points"


def test_windowed_requires_a_candle():
    with pytest.raises(InsufficientData):
        detect_windowed([])


def test_windowed_rejects_bad_width(scenario_candles):
    with pytest.raises(ValueError):
        detect_windowed(scenario_candles, half_width=0)


def test_derivative_turning_points():
    candles = make_candles([1, 3, 2, 4, 4, 1], [0, 2, 1, 1, 3, 0])
    points = detect_derivative(candles)

    assert as_tuples(points) == [
        (1, Decimal(3), "maximum"),
        (1, Decimal(2), "maximum"),
        (2, Decimal(2), "minimum"),
        (4, Decimal(3), "maximum"),
    ]


def test_flat_series_policy():
    """Flat runs flag nothing from differences but tie the window extreme everywhere."""
    candles = make_candles([5, 5, 5, 5], [5, 5, 5, 5])

    assert detect_derivative(candles) == [], "Zero differences should never flag"
    assert len(detect_windowed(candles)) == 6, "Every scanned candle ties both extremes"


def test_derivative_requires_three_candles():
    candles = make_candles([1, 2], [0, 1])
    with pytest.raises(InsufficientData):
        detect_extrema(candles, mode="derivative")


def test_unknown_mode(scenario_candles):
    with pytest.raises(ValueError):
        detect_extrema(scenario_candles, mode="fractal")


def test_alternate_extrema_keeps_most_extreme_of_each_run():
    points = [
        ExtremumPoint(0, Decimal(5), "maximum"),
        ExtremumPoint(1, Decimal(7), "maximum"),
        ExtremumPoint(2, Decimal(3), "minimum"),
        ExtremumPoint(3, Decimal(2), "minimum"),
        ExtremumPoint(4, Decimal(9), "maximum"),
    ]

    assert [p.index for p in alternate_extrema(points)] == [1, 3, 4]
