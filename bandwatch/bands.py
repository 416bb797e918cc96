from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Sequence

from .config import CLUSTER_THRESHOLD, STRONG_BAND_WEIGHT, WINDOW_HALF_WIDTH
from .errors import DegenerateBracket, EmptyInput
from .extrema import detect_extrema
from .logger import get_logger
from .models import Band, Candle, to_decimal

logger = get_logger(__name__)


def ohlc_points(candles: Iterable[Candle]) -> list[Decimal]:
    """All four prices of every candle, the clustering source used for charts."""

    points: list[Decimal] = []
    for c in candles:
        points.extend((c.high, c.low, c.close, c.open))
    return points


def cluster_bands(values: Iterable[Decimal], threshold: float = CLUSTER_THRESHOLD) -> list[Band]:
    """Greedy one-pass clustering of prices into weighted bands.

    Prices are visited from highest to lowest. A price joins the running band
    while its relative gap to the running mean stays within ``threshold``;
    otherwise the band is closed and a new one is seeded. Closed bands are never
    revisited, so the result depends on the threshold and is not a globally
    optimal clustering. Bands come out strictly decreasing by value.
    """

    limit = to_decimal(threshold)
    if limit < 0:
        raise ValueError("threshold must be non-negative")

    points = sorted((to_decimal(v) for v in values), reverse=True)
    if not points:
        raise EmptyInput("Cannot cluster an empty list of prices")

    bands: list[Band] = []
    total = points[0]
    count = 1
    for value in points[1:]:
        mean = total / count
        gap = (mean - value) / mean if mean != 0 else Decimal(0)
        if gap <= limit:
            total += value
            count += 1
        else:
            bands.append(Band(value=mean, weight=count))
            total = value
            count = 1
    bands.append(Band(value=total / count, weight=count))
    return bands


def strong_bands(bands: Iterable[Band], min_weight: int = STRONG_BAND_WEIGHT) -> list[Band]:
    return [b for b in bands if b.is_strong(min_weight)]


def select_bracket(
    bands: Sequence[Band],
    current_price: Decimal,
    min_weight: int = STRONG_BAND_WEIGHT,
) -> list[Band]:
    """Slice of bands (descending) bracketing the current price.

    The upper bound is the last strong band at or above the price, the lower
    bound the first strong band at or below it. When no strong band lies above
    the price the slice starts at the first band; when none lies below it ends
    at the last band (price below all known support).
    """

    if not bands:
        raise EmptyInput("Cannot select a bracket from an empty band list")

    price = to_decimal(current_price)
    if not any(b.is_strong(min_weight) for b in bands):
        raise DegenerateBracket(f"No band reaches weight {min_weight} around price {price}")

    start_idx = 0
    end_idx = None
    for i, band in enumerate(bands):
        if not band.is_strong(min_weight):
            continue
        if band.value >= price:
            start_idx = i
        if band.value <= price:
            end_idx = i
            break

    if end_idx is None:
        end_idx = len(bands) - 1
        logger.debug(f"Price {price} is below all strong support, bracket ends at the last band")
    return list(bands[start_idx:end_idx + 1])


def detect_bands(
    candles: Sequence[Candle],
    current_price: Decimal,
    threshold: float = CLUSTER_THRESHOLD,
    source: str = "extrema",
    mode: str = "windowed",
    half_width: int = WINDOW_HALF_WIDTH,
    min_weight: int = STRONG_BAND_WEIGHT,
    include_last: bool = False,
) -> list[Band]:
    """Critical points -> bands -> bracket around the current price.

    ``source="ohlc"`` clusters every open/high/low/close instead of the
    detected critical points.
    """

    if source == "extrema":
        points = detect_extrema(candles, mode=mode, half_width=half_width, include_last=include_last)
        values = [p.value for p in points]
    elif source == "ohlc":
        values = ohlc_points(candles)
    else:
        raise ValueError(f"Unknown band source: {source}")

    bands = cluster_bands(values, threshold)
    logger.debug(f"Clustered {len(values)} prices into {len(bands)} bands")
    return select_bracket(bands, current_price, min_weight=min_weight)
