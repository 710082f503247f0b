from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from .constants import (
    ALERT_COOLDOWN_SECONDS,
    CHECK_INTERVAL_SECONDS,
    DEFAULT_OVERBOUGHT,
    DEFAULT_OVERSOLD,
    INTERVAL_DISPLAY,
    STATE_OVERSOLD,
    SYMBOL_DISPLAY,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
)
from .models import RSIReading, SubscriberConfig
from .signals import classify

NOT_REGISTERED = "❌ Use /start first to initialize the bot"
THRESHOLD_RANGE = f"❌ The value must be between {THRESHOLD_MIN} and {THRESHOLD_MAX}"
INVALID_DESTINATION = (
    "❌ Invalid format. Use:\n"
    "• @channel_name (public channels)\n"
    "• -1001234567890 (chat ID for private channels)"
)
PROBE_HANDLE = "🤖 RSI bot added to {destination}. Alerts will be posted here."
PROBE_CHAT_ID = "🤖 RSI bot added. Alerts will be posted here."

_MARKDOWN_SPECIAL = ("\\", "_", "*", "`", "[")


def escape_markdown(text: str) -> str:
    for ch in _MARKDOWN_SPECIAL:
        text = text.replace(ch, "\\" + ch)
    return text


def format_ts(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def format_price(price: float) -> str:
    return f"{price:,.2f}"


def alert_message(reading: RSIReading, config: SubscriberConfig) -> str:
    oversold = classify(reading.value, config.oversold, config.overbought) == STATE_OVERSOLD
    kind = "🟢 OVERSOLD" if oversold else "🔴 OVERBOUGHT"
    emoji = "📈" if oversold else "📉"
    hint = (
        "💡 RSI points to a possible buy zone"
        if oversold
        else "⚠️ RSI points to a possible sell zone"
    )
    return (
        f"{emoji} *RSI ALERT {SYMBOL_DISPLAY}* {emoji}\n"
        "\n"
        f"🔸 *Type:* {kind}\n"
        f"🔸 *RSI:* {reading.value:.2f}\n"
        f"🔸 *Price:* {format_price(reading.price)}\n"
        f"🔸 *Time:* {format_ts(reading.ts)}\n"
        f"🔸 *Timeframe:* {INTERVAL_DISPLAY}\n"
        "\n"
        f"{hint}\n"
        "\n"
        f"_RSI bot {SYMBOL_DISPLAY}_"
    )


def delivery_warning(destination: str) -> str:
    return f"⚠️ Could not deliver the alert to {destination}. Check that the bot is an administrator there."


def welcome_message() -> str:
    return (
        f"🤖 *RSI Alert Bot {SYMBOL_DISPLAY}*\n"
        "\n"
        f"Welcome! You will get an alert whenever the RSI of {SYMBOL_DISPLAY} reaches your levels.\n"
        "\n"
        "📊 *Initial settings:*\n"
        f"• Oversold: ≤ {DEFAULT_OVERSOLD}\n"
        f"• Overbought: ≥ {DEFAULT_OVERBOUGHT}\n"
        "• Alerts: on\n"
        "\n"
        "Send /help to see every command.\n"
        "\n"
        f"🔄 RSI is checked every {CHECK_INTERVAL_SECONDS} seconds on {INTERVAL_DISPLAY} candles."
    )


def help_message() -> str:
    return (
        f"📖 *Help - RSI Bot {SYMBOL_DISPLAY}*\n"
        "\n"
        "🔧 *Commands:*\n"
        "`/start` - initialize with default settings\n"
        f"`/set_oversold <value>` - set the oversold level ({THRESHOLD_MIN}-{THRESHOLD_MAX})\n"
        f"`/set_overbought <value>` - set the overbought level ({THRESHOLD_MIN}-{THRESHOLD_MAX})\n"
        "`/add_channel @channel` - add a public channel\n"
        "`/add_channel -1001234567890` - add a private channel by chat ID\n"
        "`/remove_channel <channel>` - remove a channel\n"
        "`/list_channels` - show configured channels\n"
        "`/status` - show settings and the latest RSI\n"
        "`/toggle` - turn alerts on or off\n"
        "`/help` - show this help\n"
        "\n"
        "⚙️ *Settings:*\n"
        f"• Checked every {CHECK_INTERVAL_SECONDS} seconds\n"
        f"• {ALERT_COOLDOWN_SECONDS // 60} minute cooldown between alerts\n"
        f"• RSI(14) on {INTERVAL_DISPLAY} Binance candles"
    )


def channels_message(destinations: Sequence[str]) -> str:
    if not destinations:
        return (
            "📝 You have no channels configured.\n"
            "\n"
            "Use:\n"
            "/add_channel @your_channel (public)\n"
            "/add_channel -1001234567890 (private)"
        )
    lines = "\n".join(f"• {escape_markdown(d)}" for d in destinations)
    return f"📝 *Configured channels:*\n\n{lines}"


def status_message(config: SubscriberConfig, reading: Optional[RSIReading]) -> str:
    channels = ", ".join(escape_markdown(d) for d in config.destinations) or "none"
    alerts = "✅ on" if config.alerts_enabled else "❌ off"
    if reading is None:
        current = "calculating..."
        updated = "N/A"
    else:
        current = f"{reading.value:.2f} (price: {format_price(reading.price)})"
        updated = format_ts(reading.ts)
    return (
        f"📊 *RSI Bot Status {SYMBOL_DISPLAY}*\n"
        "\n"
        "🔧 *Your settings:*\n"
        f"• Oversold: ≤ {config.oversold}\n"
        f"• Overbought: ≥ {config.overbought}\n"
        f"• Alerts: {alerts}\n"
        f"• Channels: {channels}\n"
        "\n"
        f"📈 *Current RSI:* {current}\n"
        f"🕐 *Last update:* {updated}\n"
        f"⏱️ *Timeframe:* {INTERVAL_DISPLAY}\n"
        f"⏱️ *Check interval:* {CHECK_INTERVAL_SECONDS} seconds"
    )
