from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, Optional, Tuple

from . import messages
from .monitor import Monitor
from .registry import (
    DestinationExists,
    DestinationNotFound,
    InvalidArgument,
    SubscriberNotFound,
    SubscriberRegistry,
    destination_kind,
    validate_destination,
)
from .telegram import TelegramClient, TelegramError

logger = logging.getLogger("rsi_alert_bot.commands")

MARKDOWN = "Markdown"
_DIGITS_RE = re.compile(r"\d+", re.ASCII)


def parse_command(text: str) -> Optional[Tuple[str, str]]:
    """Split ``/cmd@bot args`` into ``("/cmd", "args")``; None when not a command."""
    text = (text or "").strip()
    if not text.startswith("/"):
        return None
    head, _, rest = text.partition(" ")
    name = head.split("@", 1)[0].lower()
    return name, rest.strip()


class CommandRouter:
    def __init__(self, telegram: TelegramClient, registry: SubscriberRegistry, monitor: Monitor) -> None:
        self.telegram = telegram
        self.registry = registry
        self.monitor = monitor
        self._handlers: Dict[str, Callable[[int, str], None]] = {
            "/start": self.start,
            "/set_oversold": self.set_oversold,
            "/set_overbought": self.set_overbought,
            "/add_channel": self.add_channel,
            "/remove_channel": self.remove_channel,
            "/list_channels": self.list_channels,
            "/status": self.status,
            "/toggle": self.toggle,
            "/help": self.help,
        }

    def handle_update(self, update: Dict[str, Any]) -> bool:
        message = update.get("message") or {}
        text = message.get("text")
        chat_id = (message.get("chat") or {}).get("id")
        if not isinstance(text, str) or chat_id is None:
            return False

        sender = message.get("from") or {}
        logger.info(
            "message_received chat_id=%s from=%s text=%r",
            chat_id,
            sender.get("username") or sender.get("first_name") or "-",
            text,
        )

        parsed = parse_command(text)
        if parsed is None:
            return False
        name, args = parsed
        handler = self._handlers.get(name)
        if handler is None:
            logger.debug("command_ignored chat_id=%s command=%s", chat_id, name)
            return False

        logger.info("command_received chat_id=%s command=%s", chat_id, name)
        try:
            handler(chat_id, args)
        except SubscriberNotFound:
            self._reply(chat_id, messages.NOT_REGISTERED)
        return True

    def _reply(self, chat_id: int, text: str, parse_mode: Optional[str] = None) -> None:
        try:
            self.telegram.send_message(chat_id, text, parse_mode=parse_mode)
        except TelegramError as exc:
            logger.error("reply_failed chat_id=%s error=%s", chat_id, str(exc))

    def start(self, chat_id: int, args: str) -> None:
        self.registry.register(chat_id)
        self._reply(chat_id, messages.welcome_message(), MARKDOWN)

    def set_oversold(self, chat_id: int, args: str) -> None:
        self._set_threshold(chat_id, "oversold", args)

    def set_overbought(self, chat_id: int, args: str) -> None:
        self._set_threshold(chat_id, "overbought", args)

    def _set_threshold(self, chat_id: int, kind: str, args: str) -> None:
        self.registry.get(chat_id)
        if not _DIGITS_RE.fullmatch(args):
            self._reply(chat_id, f"❌ Usage: /set_{kind} <value>")
            return
        value = int(args)
        try:
            self.registry.update_threshold(chat_id, kind, value)
        except InvalidArgument:
            self._reply(chat_id, messages.THRESHOLD_RANGE)
            return
        self._reply(chat_id, f"✅ {kind.capitalize()} level set to {value}")

    def add_channel(self, chat_id: int, args: str) -> None:
        self.registry.get(chat_id)
        try:
            destination = validate_destination(args)
        except InvalidArgument:
            self._reply(chat_id, messages.INVALID_DESTINATION)
            return
        if self.registry.has_destination(chat_id, destination):
            self._reply(chat_id, f"❌ Channel {destination} is already in the list")
            return

        is_handle = destination_kind(destination) == "handle"
        probe = (
            messages.PROBE_HANDLE.format(destination=destination)
            if is_handle
            else messages.PROBE_CHAT_ID
        )
        try:
            self.telegram.send_message(destination, probe)
        except TelegramError as exc:
            logger.error("channel_probe_failed chat_id=%s destination=%s error=%s", chat_id, destination, str(exc))
            self._reply(
                chat_id,
                f"❌ Could not add {destination}. Check that:\n"
                "• The channel exists and the name or ID is correct\n"
                "• The bot is an administrator of the channel",
            )
            return

        try:
            self.registry.add_destination(chat_id, destination)
        except DestinationExists:
            self._reply(chat_id, f"❌ Channel {destination} is already in the list")
            return
        if is_handle:
            self._reply(chat_id, f"✅ Channel {destination} added")
        else:
            self._reply(chat_id, f"✅ Channel added (ID: {destination})")

    def remove_channel(self, chat_id: int, args: str) -> None:
        destination = args.strip()
        try:
            self.registry.remove_destination(chat_id, destination)
        except DestinationNotFound:
            self._reply(chat_id, f"❌ Channel {destination} is not in the list")
            return
        self._reply(chat_id, f"✅ Channel {destination} removed")

    def list_channels(self, chat_id: int, args: str) -> None:
        config = self.registry.get(chat_id)
        parse_mode = MARKDOWN if config.destinations else None
        self._reply(chat_id, messages.channels_message(config.destinations), parse_mode)

    def status(self, chat_id: int, args: str) -> None:
        config = self.registry.get(chat_id)
        self._reply(chat_id, messages.status_message(config, self.monitor.latest), MARKDOWN)

    def toggle(self, chat_id: int, args: str) -> None:
        enabled = self.registry.toggle_alerts(chat_id)
        self._reply(chat_id, "✅ Alerts enabled" if enabled else "❌ Alerts disabled")

    def help(self, chat_id: int, args: str) -> None:
        self._reply(chat_id, messages.help_message(), MARKDOWN)
