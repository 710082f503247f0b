from __future__ import annotations

from rsi_alert_bot.constants import STATE_NEUTRAL, STATE_OVERBOUGHT, STATE_OVERSOLD
from rsi_alert_bot.models import RSIReading, SubscriberConfig
from rsi_alert_bot.signals import classify, should_alert

NOW = 1_700_000_000.0


def _reading(value: float) -> RSIReading:
    return RSIReading(value=value, ts=NOW, price=65000.0)


def test_classify_states():
    assert classify(25.0, 30, 70) == STATE_OVERSOLD
    assert classify(75.0, 30, 70) == STATE_OVERBOUGHT
    assert classify(50.0, 30, 70) == STATE_NEUTRAL


def test_classify_prefers_oversold_when_thresholds_cross():
    assert classify(50.0, 80, 20) == STATE_OVERSOLD


def test_disabled_never_alerts():
    config = SubscriberConfig(chat_id=1, alerts_enabled=False)
    assert should_alert(config, _reading(5.0), NOW) is False
    assert should_alert(config, _reading(95.0), NOW) is False


def test_boundaries_are_inclusive():
    config = SubscriberConfig(chat_id=1, oversold=30, overbought=70)
    assert should_alert(config, _reading(30.0), NOW) is True
    assert should_alert(config, _reading(70.0), NOW) is True
    assert should_alert(config, _reading(30.01), NOW) is False
    assert should_alert(config, _reading(69.99), NOW) is False


def test_cooldown_blocks_repeat_alerts():
    config = SubscriberConfig(chat_id=1)
    assert should_alert(config, _reading(20.0), NOW) is True
    config.last_alert_ts = NOW
    assert should_alert(config, _reading(20.0), NOW + 299) is False
    assert should_alert(config, _reading(20.0), NOW + 300) is True


def test_custom_cooldown():
    config = SubscriberConfig(chat_id=1, last_alert_ts=NOW)
    assert should_alert(config, _reading(20.0), NOW + 10, cooldown=5) is True


def test_never_alerted_is_not_in_cooldown():
    config = SubscriberConfig(chat_id=1)
    assert config.last_alert_ts == 0
    assert should_alert(config, _reading(90.0), 100.0) is True
