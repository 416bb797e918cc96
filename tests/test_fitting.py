"""
Test suite for the trend line and wave fits.
"""

import math

import pytest

from bandwatch.errors import EmptyInput
from bandwatch.fitting import fit_trend, fit_wave, trend_coefficients, wave_coefficients
from conftest import make_candles


def candles_from_highs(highs):
    return make_candles([round(h, 10) for h in highs], [round(h, 10) * 0.9 for h in highs])


def cubic(x):
    return 2 + 0.5 * x - 0.1 * x ** 2 + 0.01 * x ** 3


def test_trend_recovers_exact_line():
    candles = candles_from_highs([100 + 2.5 * i for i in range(20)])

    intercept, slope = trend_coefficients(candles)

    assert intercept == pytest.approx(100, abs=1e-8)
    assert slope == pytest.approx(2.5, abs=1e-8)


def test_fit_trend_returns_one_point_per_candle():
    candles = candles_from_highs([100 + 2.5 * i for i in range(20)])
    points = fit_trend(candles)

    assert len(points) == 20
    assert [p.x for p in points] == [float(i) for i in range(20)]
    assert points[-1].y == pytest.approx(100 + 2.5 * 19)


def test_gradient_descent_stays_finite_on_large_prices():
    highs = [50000 + 10 * i for i in range(20)]
    points = fit_trend(candles_from_highs(highs), method="gd")

    assert all(math.isfinite(p.y) for p in points), "Gradient descent should not diverge"
    mean_fit = sum(p.y for p in points) / len(points)
    assert mean_fit == pytest.approx(sum(highs) / len(highs), rel=0.01)


@pytest.mark.parametrize("n,base,step", [
    (100, 50000, 10),
    (20, 100, 2.5),
])
def test_gradient_descent_recovers_line(n, base, step):
    candles = make_candles([base + step * i for i in range(n)], [1] * n)

    intercept, slope = trend_coefficients(candles, method="gd")

    assert intercept == pytest.approx(base, rel=1e-3)
    assert slope == pytest.approx(step, rel=1e-3), "Gradient descent should converge within the step budget"


def test_gradient_descent_single_candle():
    intercept, slope = trend_coefficients(candles_from_highs([42]), method="gd")

    assert intercept == pytest.approx(42)
    assert slope == 0


def test_trend_single_candle_is_flat():
    points = fit_trend(candles_from_highs([42]))

    assert len(points) == 1
    assert points[0].y == pytest.approx(42)


def test_trend_errors():
    with pytest.raises(EmptyInput):
        fit_trend([])
    with pytest.raises(ValueError):
        trend_coefficients(candles_from_highs([1, 2, 3]), method="newton")


def test_wave_reproduces_polynomial_series():
    highs = [cubic(i) for i in range(30)]
    points = fit_wave(candles_from_highs(highs), degree=10)

    assert len(points) == 30
    for point, expected in zip(points, highs):
        assert point.y == pytest.approx(expected, rel=1e-6, abs=1e-6)


def test_wave_coefficients_ascending_powers():
    highs = [cubic(i) for i in range(20)]
    coefficients = wave_coefficients(candles_from_highs(highs), degree=3)

    assert coefficients == pytest.approx([2, 0.5, -0.1, 0.01], abs=1e-6)


def test_wave_coefficients_padded_for_short_series():
    coefficients = wave_coefficients(candles_from_highs([1, 4, 9]), degree=10)

    assert len(coefficients) == 11
    assert coefficients[:3] == pytest.approx([1, 2, 1], abs=1e-8)
    assert coefficients[3:] == [0.0] * 8


def test_wave_errors():
    with pytest.raises(EmptyInput):
        fit_wave([])
    with pytest.raises(ValueError):
        fit_wave(candles_from_highs([1, 2, 3]), degree=-1)
