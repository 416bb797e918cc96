from __future__ import annotations

from decimal import Decimal
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import mplfinance as mpf
import numpy as np
import pandas as pd

from .bands import cluster_bands, ohlc_points, strong_bands
from .config import CHART_THRESHOLD, STRONG_BAND_WEIGHT, WAVE_DEGREE
from .errors import EmptyInput
from .extrema import alternate_extrema, detect_windowed
from .fitting import fit_trend, fit_wave
from .logger import get_logger
from .models import Candle, to_decimal

logger = get_logger(__name__)

RESISTANCE_COLOR = "#52fc03"
SUPPORT_COLOR = "#fc0303"


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """Float OHLCV frame with a DatetimeIndex, the shape mplfinance draws."""

    if all(c.timestamp is not None for c in candles):
        index = pd.to_datetime([c.timestamp for c in candles], unit="ms")
    else:
        # one minute per candle keeps the axis monotonic without real times
        index = pd.date_range("2000-01-01", periods=len(candles), freq="min")

    return pd.DataFrame(
        {
            "Open": [float(c.open) for c in candles],
            "High": [float(c.high) for c in candles],
            "Low": [float(c.low) for c in candles],
            "Close": [float(c.close) for c in candles],
            "Volume": [float(c.volume) for c in candles],
        },
        index=pd.DatetimeIndex(index),
    )


def export_png(
    candles: Sequence[Candle],
    current_price: Decimal,
    file_name: str,
    threshold: float = CHART_THRESHOLD,
    wave_degree: int = WAVE_DEGREE,
) -> str:
    """Render candles with strong bands, critical points, trend line and wave to a PNG."""

    if not candles:
        raise EmptyInput("Cannot chart an empty candle series")

    price = to_decimal(current_price)
    df = candles_to_frame(candles)

    # Support/resistance bands over all four prices
    bands = strong_bands(cluster_bands(ohlc_points(candles), threshold), STRONG_BAND_WEIGHT)
    levels = [float(b.value) for b in bands]
    colors = [RESISTANCE_COLOR if b.value > price else SUPPORT_COLOR for b in bands]

    # Critical points, alternating highs and lows
    criticals = np.full(len(candles), np.nan)
    for point in alternate_extrema(detect_windowed(candles, include_last=True)):
        criticals[point.index] = float(point.value)

    trend = np.array([p.y for p in fit_trend(candles)])
    wave = np.array([p.y for p in fit_wave(candles, wave_degree)])

    addplots = [
        mpf.make_addplot(trend, color="tab:blue", width=1.0),
        mpf.make_addplot(wave, color="tab:orange", width=1.0),
    ]
    if not np.isnan(criticals).all():
        addplots.append(mpf.make_addplot(criticals, type="scatter", color="black", markersize=12))

    kwargs = dict(
        type="candle",
        title="Candlesticks",
        ylabel="Price",
        addplot=addplots,
        figsize=(10.24, 7.68),
        savefig=file_name,
    )
    if levels:
        kwargs["hlines"] = dict(hlines=levels, colors=colors, linewidths=0.8)

    mpf.plot(df, **kwargs)
    logger.info(f"Exported chart with {len(levels)} bands to {file_name}")
    return file_name
