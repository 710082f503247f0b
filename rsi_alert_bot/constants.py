from __future__ import annotations

SYMBOL = "BTCUSDT"
SYMBOL_DISPLAY = "BTC/USDT"
INTERVAL = "5m"
INTERVAL_DISPLAY = "5 minutes"

RSI_PERIOD = 14
KLINE_LIMIT = RSI_PERIOD + 10

CHECK_INTERVAL_SECONDS = 10
ALERT_COOLDOWN_SECONDS = 300
STARTUP_DELAY_SECONDS = 2

DEFAULT_OVERSOLD = 30
DEFAULT_OVERBOUGHT = 70
THRESHOLD_MIN = 1
THRESHOLD_MAX = 99

STATE_OVERSOLD = "OVERSOLD"
STATE_OVERBOUGHT = "OVERBOUGHT"
STATE_NEUTRAL = "NEUTRAL"

BINANCE_API_URL = "https://api.binance.com/api/v3"
TELEGRAM_API_URL = "https://api.telegram.org"
TOKEN_PLACEHOLDER = "YOUR_TOKEN_HERE"
