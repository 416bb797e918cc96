from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Sequence

from .config import BUY_POSITION, SELL_POSITION
from .errors import EmptyInput
from .models import Band, Signal, to_decimal


@dataclass(frozen=True)
class SignalThresholds:
    """Bracket positions at or beyond which BUY / SELL is recommended."""
    buy_position: Decimal = field(default_factory=lambda: Decimal(BUY_POSITION))
    sell_position: Decimal = field(default_factory=lambda: Decimal(SELL_POSITION))

    def __post_init__(self) -> None:
        object.__setattr__(self, "buy_position", to_decimal(self.buy_position))
        object.__setattr__(self, "sell_position", to_decimal(self.sell_position))
        if self.buy_position > self.sell_position:
            raise ValueError("buy_position must not exceed sell_position")


def evaluate_signal(
    bands: Sequence[Band],
    current_price: Decimal,
    thresholds: Optional[SignalThresholds] = None,
) -> Signal:
    """Decide BUY / SELL / HOLD from where the price sits inside the bracket.

    ``bands`` is a bracket as returned by ``select_bracket``: the first band is
    the highest, the last the lowest. A bracket of zero height is treated as a
    single level. Positions outside [0, 1] are accepted as they come.
    """

    if not bands:
        raise EmptyInput("Cannot evaluate a signal without bands")

    thresholds = thresholds or SignalThresholds()
    price = to_decimal(current_price)
    first, last = bands[0].value, bands[-1].value
    bracket = first - last

    if bracket == 0:
        if price > first:
            return Signal(action="BUY", reference_price=first)
        if price < first:
            return Signal(action="SELL", reference_price=first)
        return Signal(action="HOLD", reference_price=price)

    position = (price - last) / bracket
    if position <= thresholds.buy_position:
        return Signal(action="BUY", reference_price=last)
    if position >= thresholds.sell_position:
        return Signal(action="SELL", reference_price=first)
    return Signal(action="HOLD", reference_price=price)
