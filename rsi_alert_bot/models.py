from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .constants import DEFAULT_OVERBOUGHT, DEFAULT_OVERSOLD


@dataclass(frozen=True)
class Candle:
    open_time: int
    open: float
    high: float
    low: float
    close: float
    volume: float
    close_time: int
    quote_volume: float = 0.0
    trades: int = 0


@dataclass(frozen=True)
class RSIReading:
    value: float
    ts: float
    price: float


@dataclass(frozen=True)
class DeliveryOutcome:
    destination: str
    ok: bool
    error: str = ""


@dataclass
class SubscriberConfig:
    chat_id: int
    oversold: int = DEFAULT_OVERSOLD
    overbought: int = DEFAULT_OVERBOUGHT
    alerts_enabled: bool = True
    last_alert_ts: float = 0.0
    destinations: List[str] = field(default_factory=list)


@dataclass
class Config:
    dry_run: bool
    telegram_token_env: str
    telegram_token: str
    poll_timeout: int
    binance_base_url: str
    binance_timeout: int
    startup_delay: float
