from decimal import Decimal

import pytest

from bandwatch.models import Candle


def make_candles(highs, lows, opens=None, closes=None):
    """Candles from parallel High/Low lists; open/close default to the midpoint."""
    candles = []
    for i, (high, low) in enumerate(zip(highs, lows)):
        mid = (Decimal(str(high)) + Decimal(str(low))) / 2
        candles.append(Candle(
            open=opens[i] if opens else mid,
            high=high,
            low=low,
            close=closes[i] if closes else mid,
            volume=1,
        ))
    return candles


@pytest.fixture
def scenario_candles():
    """Seven candles with a clear peak at index 5 and trough at index 6."""
    return make_candles([10, 12, 11, 13, 9, 14, 8], [8, 9, 8, 10, 7, 11, 6])
