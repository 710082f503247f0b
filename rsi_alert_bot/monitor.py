from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from .binance import DataUnavailable
from .constants import INTERVAL, KLINE_LIMIT, RSI_PERIOD, SYMBOL
from .dispatcher import Dispatcher
from .indicators import InsufficientData, closes_from_candles, compute_rsi
from .models import Candle, RSIReading
from .registry import SubscriberRegistry
from .signals import classify, should_alert
from .telegram import TelegramSendError

logger = logging.getLogger("rsi_alert_bot.monitor")


class MarketData(Protocol):
    def fetch_klines(self, symbol: str, interval: str, limit: int) -> List[Candle]:
        ...


@dataclass
class CycleResult:
    reading: Optional[RSIReading]
    evaluated: int = 0
    alerted: int = 0
    failed: int = 0
    error: str = ""


class Monitor:
    def __init__(
        self,
        market: MarketData,
        registry: SubscriberRegistry,
        dispatcher: Dispatcher,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.market = market
        self.registry = registry
        self.dispatcher = dispatcher
        self.clock = clock
        self.latest: Optional[RSIReading] = None

    def current_reading(self) -> RSIReading:
        candles = self.market.fetch_klines(SYMBOL, INTERVAL, KLINE_LIMIT)
        closes = closes_from_candles(candles)
        value = compute_rsi(closes, RSI_PERIOD)
        return RSIReading(value=value, ts=self.clock(), price=closes[-1])

    def run_cycle(self) -> CycleResult:
        try:
            reading = self.current_reading()
        except (DataUnavailable, InsufficientData) as exc:
            logger.warning("cycle_skipped reason=%s", str(exc))
            return CycleResult(reading=None, error=str(exc))
        except Exception as exc:
            logger.exception("cycle_failed stage=compute")
            return CycleResult(reading=None, error=str(exc))

        self.latest = reading
        logger.info("cycle_reading rsi=%.2f price=%.2f subscribers=%d", reading.value, reading.price, len(self.registry))

        result = CycleResult(reading=reading)
        for chat_id, config in self.registry.snapshot():
            result.evaluated += 1
            now = self.clock()
            if not should_alert(config, reading, now):
                continue
            logger.info(
                "alert_due chat_id=%s state=%s rsi=%.2f destinations=%d",
                chat_id,
                classify(reading.value, config.oversold, config.overbought),
                reading.value,
                len(config.destinations),
            )
            try:
                outcomes = self.dispatcher.notify(config, reading, now)
            except TelegramSendError as exc:
                logger.error("alert_failed chat_id=%s error=%s", chat_id, str(exc))
                result.failed += 1
                continue
            result.alerted += 1
            failed_secondary = sum(1 for o in outcomes if not o.ok)
            if failed_secondary:
                logger.warning("alert_partial chat_id=%s failed_destinations=%d", chat_id, failed_secondary)

        logger.info(
            "cycle_done evaluated=%d alerted=%d failed=%d",
            result.evaluated,
            result.alerted,
            result.failed,
        )
        return result
