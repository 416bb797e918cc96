from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from .bands import detect_bands
from .binance import BinanceClient
from .chart import export_png
from .config import CANDLE_LIMIT, CHART_DIR, CLUSTER_THRESHOLD, TRADE_INTERVAL
from .logger import get_logger
from .models import Band, Candle, Signal
from .signals import SignalThresholds, evaluate_signal
from .telegram import TelegramNotifier

logger = get_logger(__name__)


@dataclass(frozen=True)
class Market:
    base: str
    quote: str

    @classmethod
    def parse(cls, pair: str) -> "Market":
        base, sep, quote = pair.strip().upper().partition("/")
        if not sep or not base or not quote:
            raise ValueError(f"Market must look like BASE/QUOTE, got {pair!r}")
        return cls(base=base, quote=quote)

    @property
    def symbol(self) -> str:
        return f"{self.base}{self.quote}"

    def __str__(self) -> str:
        return f"{self.base}-{self.quote}"


@dataclass(frozen=True)
class Evaluation:
    bracket: list[Band]
    signal: Signal


def format_action(signal: Signal) -> str:
    if signal.action == "HOLD":
        return "NOTHING"
    return f"{signal.action} at {signal.reference_price}"


def evaluate_market(
    candles: Sequence[Candle],
    current_price: Decimal,
    threshold: float = CLUSTER_THRESHOLD,
    thresholds: Optional[SignalThresholds] = None,
) -> Evaluation:
    """One side-effect-free pass: bands around the price, then the decision."""

    bracket = detect_bands(candles, current_price, threshold=threshold)
    return Evaluation(bracket=bracket, signal=evaluate_signal(bracket, current_price, thresholds))


def gate_signal(signal: Signal, quote_balance: Optional[Decimal], base_balance: Optional[Decimal]) -> Signal:
    """Downgrade BUY without quote funds and SELL without base holdings to HOLD."""

    if signal.action == "BUY" and not (quote_balance and quote_balance > 0):
        return Signal(action="HOLD", reference_price=signal.reference_price)
    if signal.action == "SELL" and not (base_balance and base_balance > 0):
        return Signal(action="HOLD", reference_price=signal.reference_price)
    return signal


def watch_market(
    market: Market,
    client: BinanceClient,
    notifier: TelegramNotifier,
    interval: str = TRADE_INTERVAL,
    limit: int = CANDLE_LIMIT,
    threshold: float = CLUSTER_THRESHOLD,
    thresholds: Optional[SignalThresholds] = None,
    balance_aware: bool = False,
    chart_dir: Optional[str] = CHART_DIR,
) -> Optional[Evaluation]:
    """Fetch one snapshot of a market, evaluate it and report the recommendation."""

    candles = client.get_candles(market.symbol, interval=interval, limit=limit)
    last = client.get_last_price(market.symbol)
    if not candles or last is None:
        logger.warning(f"No market data for {market}. Skipping.")
        return None

    logger.debug(f"Market {market}: last stick\n{candles[-1]}")

    evaluation = evaluate_market(candles, last, threshold=threshold, thresholds=thresholds)
    signal = evaluation.signal
    if balance_aware and signal.action != "HOLD":
        asset = market.quote if signal.action == "BUY" else market.base
        balance = client.get_balance(asset)
        if balance is None:
            logger.warning(f"Market {market}: could not fetch {asset} balance, holding instead of {format_action(signal)}")
            gated = Signal(action="HOLD", reference_price=signal.reference_price)
        elif signal.action == "BUY":
            gated = gate_signal(signal, balance, None)
        else:
            gated = gate_signal(signal, None, balance)
        if balance is not None and gated != signal:
            logger.info(f"Market {market}: {format_action(signal)} suppressed, {asset} balance is {balance}")
        evaluation = Evaluation(bracket=evaluation.bracket, signal=gated)

    supports = "[" + " ".join(str(b) for b in evaluation.bracket) + "]"
    action = format_action(evaluation.signal)
    logger.info(f"Market {market}: last={last}, Supp={supports}\n\tRecommended: {action}")

    if evaluation.signal.action != "HOLD":
        notifier.send(f"Market {market.base}-{market.quote}: last={last}, Supp={supports}\n\tRecommended: {action}")

    if chart_dir:
        os.makedirs(chart_dir, exist_ok=True)
        export_png(candles, last, os.path.join(chart_dir, f"{market.symbol}_candlesticks.png"))

    return evaluation
