from __future__ import annotations

import logging
from typing import Any, List

import requests

from .constants import BINANCE_API_URL
from .models import Candle

logger = logging.getLogger("rsi_alert_bot.binance")


class DataUnavailable(Exception):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Market data unavailable: {reason}")
        self.reason = reason


class BinanceClient:
    def __init__(self, base_url: str = BINANCE_API_URL, timeout: int = 15) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()

    @staticmethod
    def _parse_kline(row: Any) -> Candle:
        # [open_time, open, high, low, close, volume, close_time, quote_volume, trades, ...]
        return Candle(
            open_time=int(row[0]),
            open=float(row[1]),
            high=float(row[2]),
            low=float(row[3]),
            close=float(row[4]),
            volume=float(row[5]),
            close_time=int(row[6]),
            quote_volume=float(row[7]),
            trades=int(row[8]),
        )

    def fetch_klines(self, symbol: str, interval: str, limit: int) -> List[Candle]:
        params = {
            "symbol": symbol,
            "interval": interval,
            "limit": limit,
        }
        try:
            resp = self._session.get(
                f"{self.base_url}/klines",
                params=params,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as exc:
            raise DataUnavailable(f"http_error:{exc}") from exc
        except ValueError as exc:
            raise DataUnavailable("invalid_json") from exc

        if not isinstance(payload, list):
            raise DataUnavailable("unexpected_payload")

        candles: List[Candle] = []
        for row in payload:
            try:
                candles.append(self._parse_kline(row))
            except (IndexError, TypeError, ValueError) as exc:
                raise DataUnavailable("malformed_kline") from exc

        candles.sort(key=lambda c: c.open_time)
        logger.debug(
            "klines_fetched symbol=%s interval=%s requested=%d received=%d",
            symbol,
            interval,
            limit,
            len(candles),
        )
        return candles
