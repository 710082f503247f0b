from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Set

import pytest

from rsi_alert_bot.telegram import TelegramError, TelegramSendError


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


class FakeTelegram:
    def __init__(self) -> None:
        self.sent: List[Dict[str, Any]] = []
        self.fail_for: Set[Any] = set()
        self.updates: List[List[Dict[str, Any]]] = []
        self.poll_error: Optional[TelegramError] = None
        self.on_poll: Optional[Callable[[int], None]] = None

    def send_message(self, chat_id, text, parse_mode=None) -> None:
        if chat_id in self.fail_for:
            raise TelegramSendError(f"telegram_send_failed chat_id={chat_id} status=403 detail=Forbidden")
        self.sent.append({"chat_id": chat_id, "text": text, "parse_mode": parse_mode})

    def get_updates(self, timeout: int = 25) -> List[Dict[str, Any]]:
        if self.on_poll:
            self.on_poll(timeout)
        if self.poll_error is not None:
            error, self.poll_error = self.poll_error, None
            raise error
        if self.updates:
            return self.updates.pop(0)
        return []

    def texts_to(self, chat_id) -> List[str]:
        return [m["text"] for m in self.sent if m["chat_id"] == chat_id]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def telegram():
    return FakeTelegram()


def make_update(chat_id: int, text: str, update_id: int = 1) -> Dict[str, Any]:
    return {
        "update_id": update_id,
        "message": {
            "message_id": update_id,
            "chat": {"id": chat_id, "type": "private"},
            "from": {"id": chat_id, "username": "trader"},
            "text": text,
        },
    }


@pytest.fixture
def update():
    return make_update
