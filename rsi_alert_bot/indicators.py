"""Wilder's Relative Strength Index."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from .constants import RSI_PERIOD
from .models import Candle


class InsufficientData(Exception):
    def __init__(self, needed: int, got: int) -> None:
        super().__init__(f"RSI needs at least {needed} prices, got {got}")
        self.needed = needed
        self.got = got


def closes_from_candles(candles: Iterable[Candle]) -> List[float]:
    return [c.close for c in candles]


def compute_rsi(closes: Sequence[float], period: int = RSI_PERIOD) -> float:
    """Return the RSI of ``closes`` rounded to two decimals.

    The first ``period`` gains and losses are averaged to seed the series, then
    every later difference is folded in with Wilder's smoothing
    ``avg = (avg * (period - 1) + x) / period``.
    """
    if period < 1:
        raise ValueError("period must be >= 1")
    if len(closes) < period + 1:
        raise InsufficientData(period + 1, len(closes))

    gains: List[float] = []
    losses: List[float] = []
    for prev, curr in zip(closes, closes[1:]):
        diff = curr - prev
        gains.append(diff if diff > 0 else 0.0)
        losses.append(-diff if diff < 0 else 0.0)

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return round(100.0 - 100.0 / (1.0 + rs), 2)
