from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from .constants import THRESHOLD_MAX, THRESHOLD_MIN
from .models import SubscriberConfig

logger = logging.getLogger("rsi_alert_bot.registry")

_HANDLE_RE = re.compile(r"@\w+", re.ASCII)
_CHAT_ID_RE = re.compile(r"-100\d{10}", re.ASCII)

THRESHOLD_KINDS = ("oversold", "overbought")


class RegistryError(Exception):
    pass


class NotFound(RegistryError):
    pass


class SubscriberNotFound(NotFound):
    def __init__(self, chat_id: int) -> None:
        super().__init__(f"subscriber {chat_id} is not registered")
        self.chat_id = chat_id


class DestinationNotFound(NotFound):
    def __init__(self, destination: str) -> None:
        super().__init__(f"destination {destination} is not configured")
        self.destination = destination


class AlreadyExists(RegistryError):
    pass


class DestinationExists(AlreadyExists):
    def __init__(self, destination: str) -> None:
        super().__init__(f"destination {destination} is already configured")
        self.destination = destination


class InvalidArgument(RegistryError):
    pass


def destination_kind(text: str) -> Optional[str]:
    """Return "handle" for ``@name``, "chat_id" for ``-100XXXXXXXXXX``, else None."""
    if _HANDLE_RE.fullmatch(text):
        return "handle"
    if _CHAT_ID_RE.fullmatch(text):
        return "chat_id"
    return None


def validate_destination(text: str) -> str:
    destination = text.strip()
    if destination_kind(destination) is None:
        raise InvalidArgument(f"invalid destination format: {destination!r}")
    return destination


def validate_threshold(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"threshold must be an integer, got {value!r}")
    if not THRESHOLD_MIN <= value <= THRESHOLD_MAX:
        raise InvalidArgument(
            f"threshold must be between {THRESHOLD_MIN} and {THRESHOLD_MAX}, got {value}"
        )
    return value


class SubscriberRegistry:
    """In-memory subscriber configs keyed by chat id."""

    def __init__(self) -> None:
        self._subscribers: Dict[int, SubscriberConfig] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def register(self, chat_id: int) -> SubscriberConfig:
        # Re-registering resets any previous customization.
        config = SubscriberConfig(chat_id=chat_id)
        replaced = chat_id in self._subscribers
        self._subscribers[chat_id] = config
        logger.info("subscriber_registered chat_id=%s reset=%s", chat_id, str(replaced).lower())
        return config

    def get(self, chat_id: int) -> SubscriberConfig:
        config = self._subscribers.get(chat_id)
        if config is None:
            raise SubscriberNotFound(chat_id)
        return config

    def update_threshold(self, chat_id: int, kind: str, value: int) -> SubscriberConfig:
        config = self.get(chat_id)
        if kind not in THRESHOLD_KINDS:
            raise InvalidArgument(f"unknown threshold kind: {kind!r}")
        setattr(config, kind, validate_threshold(value))
        logger.info("threshold_updated chat_id=%s kind=%s value=%d", chat_id, kind, value)
        return config

    def toggle_alerts(self, chat_id: int) -> bool:
        config = self.get(chat_id)
        config.alerts_enabled = not config.alerts_enabled
        logger.info("alerts_toggled chat_id=%s enabled=%s", chat_id, str(config.alerts_enabled).lower())
        return config.alerts_enabled

    def has_destination(self, chat_id: int, destination: str) -> bool:
        return destination in self.get(chat_id).destinations

    def add_destination(self, chat_id: int, destination: str) -> SubscriberConfig:
        config = self.get(chat_id)
        if destination in config.destinations:
            raise DestinationExists(destination)
        config.destinations.append(destination)
        logger.info("destination_added chat_id=%s destination=%s", chat_id, destination)
        return config

    def remove_destination(self, chat_id: int, destination: str) -> SubscriberConfig:
        config = self.get(chat_id)
        if destination not in config.destinations:
            raise DestinationNotFound(destination)
        config.destinations.remove(destination)
        logger.info("destination_removed chat_id=%s destination=%s", chat_id, destination)
        return config

    def mark_alerted(self, chat_id: int, ts: float) -> None:
        config = self._subscribers.get(chat_id)
        if config is None:
            return
        config.last_alert_ts = ts

    def snapshot(self) -> List[Tuple[int, SubscriberConfig]]:
        return list(self._subscribers.items())
