"""Project data models for candles, critical points, support bands and signals."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, List, Literal, Optional

import numpy as np
import pandas as pd


def to_decimal(value: Any) -> Decimal:
    """Convert prices to Decimal through their text form so binary floats do not leak in."""

    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Candle:
    """One fixed-period OHLCV summary.

    Attributes:
        open: first traded price of the period
        high: highest traded price of the period
        low: lowest traded price of the period
        close: last traded price of the period
        volume: traded volume during the period
        timestamp: period open time in epoch milliseconds, only used for charts

    """
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal = Decimal(0)
    timestamp: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("open", "high", "low", "close", "volume"):
            value = to_decimal(getattr(self, name))
            if not value.is_finite():
                raise ValueError(f"Candle {name} must be a finite number, got {value}")
            if value < 0:
                raise ValueError(f"Candle {name} must be non-negative, got {value}")
            object.__setattr__(self, name, value)

    def __str__(self) -> str:
        if self.close > self.open:
            color = "Green/Bullish"
        elif self.close < self.open:
            color = "Red/Bearish"
        else:
            color = "Neutral"
        return (
            f"{color} Candle\nHigh: {self.high}\nOpen: {self.open}\n"
            f"Close: {self.close}\nLow: {self.low}\nVolume: {self.volume}"
        )


@dataclass(frozen=True)
class ExtremumPoint:
    """A local maximum of the High series or minimum of the Low series."""
    index: int
    value: Decimal
    kind: Literal["maximum", "minimum"]


@dataclass(frozen=True)
class Band:
    """Clustered support/resistance level; weight is the number of merged prices."""
    value: Decimal
    weight: int

    def is_strong(self, min_weight: int = 3) -> bool:
        return self.weight >= min_weight

    def __str__(self) -> str:
        return f"{self.value}({self.weight})"


@dataclass(frozen=True)
class Signal:
    action: Literal["BUY", "SELL", "HOLD"]
    reference_price: Decimal


@dataclass(frozen=True)
class Point:
    x: float
    y: float


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """Build candles from a kline frame with open/high/low/close/volume columns.

    The frame index is used as the candle timestamp when it is integral
    (epoch milliseconds, as returned by the exchange client).
    """

    if df is None or df.empty:
        return []

    required = {"open", "high", "low", "close", "volume"}
    if not required.issubset(df.columns):
        raise ValueError(f"Kline frame must contain columns: {sorted(required)}")

    candles: List[Candle] = []
    for ts, row in df.sort_index().iterrows():
        candles.append(
            Candle(
                open=to_decimal(row["open"]),
                high=to_decimal(row["high"]),
                low=to_decimal(row["low"]),
                close=to_decimal(row["close"]),
                volume=to_decimal(row["volume"]),
                timestamp=int(ts) if isinstance(ts, (int, np.integer)) else None,
            )
        )
    return candles
