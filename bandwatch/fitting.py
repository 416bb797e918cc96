"""
Display fits over the High series
Both fits use the candle index as the x axis and work in floating point; they
only feed the chart and never the signal decision.
- Trend line: straight line, closed-form least squares or gradient descent
- Wave: bounded-degree polynomial least squares in a Chebyshev basis
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
from numpy.polynomial import Chebyshev, Polynomial

from .config import TREND_ITERATIONS, TREND_LEARNING_RATE, WAVE_DEGREE
from .errors import EmptyInput
from .models import Candle, Point


def _high_series(candles: Sequence[Candle]) -> Tuple[np.ndarray, np.ndarray]:
    if len(candles) == 0:
        raise EmptyInput("Cannot fit an empty candle series")
    xs = np.arange(len(candles), dtype=float)
    ys = np.array([float(c.high) for c in candles], dtype=float)
    return xs, ys


def _gradient_descent(xs: np.ndarray, ys: np.ndarray, iterations: int, learning_rate: float) -> Tuple[float, float]:
    """
    Batch gradient descent on the mean squared error.

    x is centred on its mean and scaled to [-1, 1], y by its largest
    magnitude, so the intercept and slope gradients are independent and a
    fixed learning rate converges whatever the price level. The result is
    mapped back to the raw index axis.
    """
    x_mid = xs.mean()
    x_half = (xs.max() - xs.min()) / 2 or 1.0
    y_scale = np.abs(ys).max() or 1.0
    u = (xs - x_mid) / x_half
    v = ys / y_scale

    a, b = 0.0, 0.0
    for _ in range(iterations):
        residual = a + b * u - v
        a -= learning_rate * 2 * residual.mean()
        b -= learning_rate * 2 * (residual * u).mean()

    slope = b * y_scale / x_half
    return a * y_scale - slope * x_mid, slope


def trend_coefficients(
    candles: Sequence[Candle],
    method: str = "lstsq",
    iterations: int = TREND_ITERATIONS,
    learning_rate: float = TREND_LEARNING_RATE,
) -> Tuple[float, float]:
    """
    Fit High[i] ~ intercept + slope * i

    Args:
        candles: candle series, oldest first
        method: 'lstsq' for the closed-form solution, 'gd' for gradient descent
        iterations: gradient descent steps (ignored by 'lstsq')
        learning_rate: gradient descent rate on the rescaled problem

    Returns:
        Tuple of (intercept, slope)
    """
    xs, ys = _high_series(candles)
    if method == "lstsq":
        design = np.column_stack([np.ones_like(xs), xs])
        (intercept, slope), *_ = np.linalg.lstsq(design, ys, rcond=None)
        return float(intercept), float(slope)
    if method == "gd":
        return _gradient_descent(xs, ys, iterations, learning_rate)
    raise ValueError(f"Unknown trend method: {method}")


def fit_trend(candles: Sequence[Candle], method: str = "lstsq", iterations: int = TREND_ITERATIONS,
              learning_rate: float = TREND_LEARNING_RATE) -> List[Point]:
    intercept, slope = trend_coefficients(candles, method=method, iterations=iterations,
                                          learning_rate=learning_rate)
    return [Point(x=float(i), y=intercept + slope * i) for i in range(len(candles))]


def _wave_series(candles: Sequence[Candle], degree: int) -> Tuple[np.ndarray, Chebyshev]:
    if degree < 0:
        raise ValueError("degree must be non-negative")
    xs, ys = _high_series(candles)
    # a single candle still maps onto a valid (degree 0) domain
    domain = [0.0, max(xs[-1], 1.0)]
    series = Chebyshev.fit(xs, ys, min(degree, len(xs) - 1), domain=domain)
    return xs, series


def wave_coefficients(candles: Sequence[Candle], degree: int = WAVE_DEGREE) -> List[float]:
    """
    Power-basis coefficients of the wave fit, ascending, padded to degree + 1.

    The fit itself happens in a Chebyshev basis over the index range; the
    conversion to plain powers of the index is for reporting only.
    """
    _, series = _wave_series(candles, degree)
    coef = series.convert(kind=Polynomial).coef
    padded = np.zeros(degree + 1)
    padded[:len(coef)] = coef
    return [float(c) for c in padded]


def fit_wave(candles: Sequence[Candle], degree: int = WAVE_DEGREE) -> List[Point]:
    xs, series = _wave_series(candles, degree)
    return [Point(x=float(x), y=float(y)) for x, y in zip(xs, series(xs))]
