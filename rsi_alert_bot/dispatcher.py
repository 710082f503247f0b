from __future__ import annotations

import logging
from typing import List, Sequence

from .messages import alert_message, delivery_warning
from .models import DeliveryOutcome, RSIReading, SubscriberConfig
from .registry import SubscriberRegistry
from .telegram import ChatId, TelegramClient, TelegramSendError

logger = logging.getLogger("rsi_alert_bot.dispatcher")

PARSE_MODE = "Markdown"


class Dispatcher:
    def __init__(self, telegram: TelegramClient, registry: SubscriberRegistry) -> None:
        self.telegram = telegram
        self.registry = registry

    def dispatch(self, primary: ChatId, message: str, destinations: Sequence[str]) -> List[DeliveryOutcome]:
        """Send ``message`` to ``primary`` and then to every secondary destination.

        A failed primary send raises ``TelegramSendError`` before any secondary
        is attempted. Secondary failures are isolated: each one is recorded in
        the returned outcomes and reported to ``primary`` as a warning.
        """
        self.telegram.send_message(primary, message, parse_mode=PARSE_MODE)
        outcomes = [DeliveryOutcome(destination=str(primary), ok=True)]

        for destination in list(destinations):
            try:
                self.telegram.send_message(destination, message, parse_mode=PARSE_MODE)
            except TelegramSendError as exc:
                logger.error("dispatch_destination_failed destination=%s error=%s", destination, str(exc))
                outcomes.append(DeliveryOutcome(destination=destination, ok=False, error=str(exc)))
                self._warn(primary, destination)
                continue
            logger.info("dispatch_destination_sent destination=%s", destination)
            outcomes.append(DeliveryOutcome(destination=destination, ok=True))

        return outcomes

    def notify(self, config: SubscriberConfig, reading: RSIReading, now: float) -> List[DeliveryOutcome]:
        outcomes = self.dispatch(config.chat_id, alert_message(reading, config), config.destinations)
        self.registry.mark_alerted(config.chat_id, now)
        return outcomes

    def _warn(self, primary: ChatId, destination: str) -> None:
        try:
            self.telegram.send_message(primary, delivery_warning(destination))
        except TelegramSendError as exc:
            logger.error("dispatch_warning_failed chat_id=%s destination=%s error=%s", primary, destination, str(exc))
