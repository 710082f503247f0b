from __future__ import annotations

import pytest

from rsi_alert_bot.indicators import InsufficientData, closes_from_candles, compute_rsi
from rsi_alert_bot.models import Candle

REFERENCE_PRICES = [
    44, 44.25, 44.5, 43.75, 44.5, 45, 45.5, 45,
    45.75, 46, 46.5, 46.25, 47, 46.75, 46.5,
]


def test_rising_prices_give_100():
    assert compute_rsi([float(p) for p in range(1, 31)]) == 100.0


def test_falling_prices_give_0():
    assert compute_rsi([float(p) for p in range(30, 0, -1)]) == 0.0


def test_flat_prices_give_100():
    # No losses at all, so the loss average is zero.
    assert compute_rsi([10.0] * 20) == 100.0


def test_reference_series_seed_only():
    assert compute_rsi(REFERENCE_PRICES, 14) == 69.23


def test_reference_series_with_smoothing():
    assert compute_rsi(REFERENCE_PRICES + [47], 14) == 71.58


def test_result_is_bounded_and_rounded():
    prices = [100, 101.3, 99.8, 102.7, 101.1, 103.9, 100.2, 98.7, 99.9, 104.4,
              103.3, 101.8, 105.6, 104.2, 102.9, 106.1, 103.7, 107.3]
    value = compute_rsi(prices, 14)
    assert 0 <= value <= 100
    assert value == round(value, 2)


def test_insufficient_data():
    with pytest.raises(InsufficientData) as exc:
        compute_rsi([1.0] * 14, 14)
    assert exc.value.needed == 15
    assert exc.value.got == 14


def test_exactly_period_plus_one_is_enough():
    assert compute_rsi(REFERENCE_PRICES[:15], 14) == 69.23


def test_invalid_period():
    with pytest.raises(ValueError):
        compute_rsi([1.0, 2.0], 0)


def test_closes_from_candles():
    candles = [
        Candle(open_time=i, open=1.0, high=2.0, low=0.5, close=float(i), volume=1.0, close_time=i + 1)
        for i in range(3)
    ]
    assert closes_from_candles(candles) == [0.0, 1.0, 2.0]
