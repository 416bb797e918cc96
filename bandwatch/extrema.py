from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from .config import WINDOW_HALF_WIDTH
from .errors import InsufficientData
from .models import Candle, ExtremumPoint


def detect_windowed(
    candles: Sequence[Candle],
    half_width: int = WINDOW_HALF_WIDTH,
    include_last: bool = False,
) -> list[ExtremumPoint]:
    """Flag candles whose High (Low) is the extreme of the surrounding window.

    The window [i - half_width, i + half_width] is clamped to the series, so
    candles near either end are compared against fewer neighbours. The newest
    candle is skipped unless include_last is set, since it is usually still open.
    """

    n = len(candles)
    if n < 1:
        raise InsufficientData("Windowed detection needs at least one candle")
    if half_width < 1:
        raise ValueError("half_width must be at least 1")

    highs = [c.high for c in candles]
    lows = [c.low for c in candles]
    end = n if include_last else n - 1

    points: list[ExtremumPoint] = []
    for candidate in range(end):
        start = max(candidate - half_width, 0)
        stop = min(candidate + half_width, n - 1)

        if highs[candidate] == max(highs[start:stop + 1]):
            points.append(ExtremumPoint(index=candidate, value=highs[candidate], kind="maximum"))
        if lows[candidate] == min(lows[start:stop + 1]):
            points.append(ExtremumPoint(index=candidate, value=lows[candidate], kind="minimum"))
    return points


def _turning_points(values: list[Decimal], n: int) -> list[tuple[int, str]]:
    """Sign changes of the first difference; zero steps never count."""

    diffs = [Decimal(0)] + [values[i] - values[i - 1] for i in range(1, n)]
    turns = []
    for i in range(1, n - 1):
        if diffs[i] > 0 and diffs[i + 1] < 0:
            turns.append((i, "maximum"))
        elif diffs[i] < 0 and diffs[i + 1] > 0:
            turns.append((i, "minimum"))
    return turns


def detect_derivative(candles: Sequence[Candle]) -> list[ExtremumPoint]:
    """Flag turning points of both the High and the Low series from first differences."""

    n = len(candles)
    if n < 3:
        raise InsufficientData(f"Derivative detection needs at least 3 candles, got {n}")

    highs = [c.high for c in candles]
    lows = [c.low for c in candles]
    high_turns = dict(_turning_points(highs, n))
    low_turns = dict(_turning_points(lows, n))

    points: list[ExtremumPoint] = []
    for i in range(1, n - 1):
        if i in high_turns:
            points.append(ExtremumPoint(index=i, value=highs[i], kind=high_turns[i]))
        if i in low_turns:
            points.append(ExtremumPoint(index=i, value=lows[i], kind=low_turns[i]))
    return points


def detect_extrema(
    candles: Sequence[Candle],
    mode: str = "windowed",
    half_width: int = WINDOW_HALF_WIDTH,
    include_last: bool = False,
) -> list[ExtremumPoint]:
    """Dispatch to the windowed (default) or derivative critical point detector."""

    if mode == "windowed":
        return detect_windowed(candles, half_width=half_width, include_last=include_last)
    if mode == "derivative":
        return detect_derivative(candles)
    raise ValueError(f"Unknown detection mode: {mode}")


def alternate_extrema(points: Sequence[ExtremumPoint]) -> list[ExtremumPoint]:
    """Collapse runs of the same kind into one point so maxima and minima alternate.

    Within a run the higher maximum (or lower minimum) wins; on ties the
    earlier point is kept.
    """

    ret: list[ExtremumPoint] = []
    for point in points:
        if not ret or ret[-1].kind != point.kind:
            ret.append(point)
        elif point.kind == "maximum" and ret[-1].value < point.value:
            ret[-1] = point
        elif point.kind == "minimum" and ret[-1].value > point.value:
            ret[-1] = point
    return ret
