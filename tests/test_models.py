"""
Test suite for the data models.
"""

from decimal import Decimal

import pandas as pd
import pytest

from bandwatch.models import Band, Candle, candles_from_frame


def test_candle_converts_to_decimal():
    """Floats go through their text form, so 0.1 stays exactly 0.1."""
    candle = Candle(open=0.1, high=0.3, low=0.1, close=0.2, volume=5)

    assert candle.high == Decimal("0.3"), "High should be converted exactly"
    assert isinstance(candle.volume, Decimal), "Volume should be a Decimal"


def test_candle_rejects_negative_prices():
    with pytest.raises(ValueError):
        Candle(open=1, high=2, low=-1, close=1)


@pytest.mark.parametrize("bad", [float("nan"), "NaN", "Infinity"])
def test_candle_rejects_non_finite_prices(bad):
    with pytest.raises(ValueError):
        Candle(open=1, high=bad, low=1, close=1)


def test_candles_from_frame_rejects_missing_cell():
    df = pd.DataFrame({
        'open': [1.0], 'high': [float("nan")], 'low': [0.5], 'close': [1.0], 'volume': [3.0],
    }, index=pd.Index([1000], dtype='int64'))

    with pytest.raises(ValueError):
        candles_from_frame(df)


def test_candle_str():
    bullish = Candle(open=1, high=3, low="0.5", close=2, volume=7)

    assert str(bullish) == "Green/Bullish Candle\nHigh: 3\nOpen: 1\nClose: 2\nLow: 0.5\nVolume: 7"
    assert str(Candle(open=2, high=3, low=1, close=1)).startswith("Red/Bearish Candle")
    assert str(Candle(open=2, high=3, low=1, close=2)).startswith("Neutral Candle")


def test_candle_is_immutable():
    candle = Candle(open=1, high=2, low=1, close=1)
    with pytest.raises(AttributeError):
        candle.high = Decimal(3)


def test_band_strength_and_str():
    band = Band(value=Decimal("10.5"), weight=3)

    assert band.is_strong(), "A band of weight 3 is strong"
    assert not Band(value=Decimal(1), weight=2).is_strong(), "A band of weight 2 is weak"
    assert str(band) == "10.5(3)"


def test_candles_from_frame_sorts_and_keeps_timestamps():
    df = pd.DataFrame({
        'open': ['2', '1'],
        'high': ['3', '2'],
        'low': ['1', '0.5'],
        'close': ['2.5', '1.5'],
        'volume': ['10', '20'],
    }, index=pd.Index([2000, 1000], dtype='int64'))

    candles = candles_from_frame(df)

    assert [c.timestamp for c in candles] == [1000, 2000], "Candles should be ordered oldest first"
    assert candles[0].low == Decimal("0.5")
    assert candles[1].close == Decimal("2.5")


def test_candles_from_frame_requires_columns():
    with pytest.raises(ValueError):
        candles_from_frame(pd.DataFrame({'open': [1]}))


def test_candles_from_empty_frame():
    assert candles_from_frame(pd.DataFrame()) == []
