from __future__ import annotations

from .constants import (
    ALERT_COOLDOWN_SECONDS,
    STATE_NEUTRAL,
    STATE_OVERBOUGHT,
    STATE_OVERSOLD,
)
from .models import RSIReading, SubscriberConfig


def classify(value: float, oversold: int, overbought: int) -> str:
    # Oversold wins when the two thresholds cross.
    if value <= oversold:
        return STATE_OVERSOLD
    if value >= overbought:
        return STATE_OVERBOUGHT
    return STATE_NEUTRAL


def should_alert(
    config: SubscriberConfig,
    reading: RSIReading,
    now: float,
    cooldown: float = ALERT_COOLDOWN_SECONDS,
) -> bool:
    if not config.alerts_enabled:
        return False
    if now - config.last_alert_ts < cooldown:
        return False
    return classify(reading.value, config.oversold, config.overbought) != STATE_NEUTRAL
