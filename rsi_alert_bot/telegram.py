from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Union

import requests

from .constants import TELEGRAM_API_URL

logger = logging.getLogger("rsi_alert_bot.telegram")

ChatId = Union[int, str]


class TelegramError(Exception):
    pass


class TelegramSendError(TelegramError):
    pass


class TelegramClient:
    def __init__(
        self,
        token: str,
        dry_run: bool = False,
        base_url: str = TELEGRAM_API_URL,
        timeout: int = 15,
    ) -> None:
        self.token = token
        self.dry_run = dry_run
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._offset = 0

    def _url(self, method: str) -> str:
        return f"{self.base_url}/bot{self.token}/{method}"

    def get_me(self) -> Dict[str, Any]:
        if self.dry_run:
            return {"id": 0, "username": "dry_run"}
        try:
            resp = self._session.get(self._url("getMe"), timeout=self.timeout)
        except requests.RequestException as exc:
            raise TelegramError(f"telegram_get_me_failed error={exc}") from exc
        return self._result(resp, "telegram_get_me_failed")

    def send_message(self, chat_id: ChatId, text: str, parse_mode: Optional[str] = None) -> None:
        if self.dry_run:
            logger.info("dry_run_send chat_id=%s text=%r", chat_id, text)
            return

        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode

        url = self._url("sendMessage")
        try:
            resp = self._session.post(url, json=payload, timeout=self.timeout)
            if resp.status_code == 429:
                retry_after = _retry_after(resp)
                time.sleep(retry_after)
                resp = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TelegramSendError(f"telegram_send_failed chat_id={chat_id} error={exc}") from exc

        if resp.status_code >= 400:
            detail = _telegram_error_detail(resp)
            raise TelegramSendError(
                f"telegram_send_failed chat_id={chat_id} status={resp.status_code} detail={detail}"
            )

    def get_updates(self, timeout: int = 25) -> List[Dict[str, Any]]:
        """Long-poll for new updates and advance the offset past them."""
        if self.dry_run:
            if timeout > 0:
                time.sleep(timeout)
            return []

        params = {"offset": self._offset, "timeout": timeout, "allowed_updates": '["message"]'}
        try:
            resp = self._session.get(self._url("getUpdates"), params=params, timeout=timeout + self.timeout)
        except requests.RequestException as exc:
            raise TelegramError(f"telegram_poll_failed error={exc}") from exc

        updates = self._result(resp, "telegram_poll_failed")
        if not isinstance(updates, list):
            raise TelegramError("telegram_poll_failed detail=unexpected_payload")
        for update in updates:
            update_id = update.get("update_id")
            if isinstance(update_id, int) and update_id >= self._offset:
                self._offset = update_id + 1
        return updates

    @staticmethod
    def _result(resp: requests.Response, event: str) -> Any:
        if resp.status_code >= 400:
            raise TelegramError(f"{event} status={resp.status_code} detail={_telegram_error_detail(resp)}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise TelegramError(f"{event} detail=invalid_json") from exc
        if not payload.get("ok"):
            raise TelegramError(f"{event} detail={payload.get('description') or 'not_ok'}")
        return payload.get("result")


def _telegram_error_detail(resp: requests.Response) -> str:
    try:
        payload = resp.json()
        description = payload.get("description")
        if isinstance(description, str) and description:
            return description
    except ValueError:
        pass
    text = (resp.text or "").strip()
    if text:
        return text
    return "unknown_error"


def _retry_after(resp: requests.Response) -> int:
    try:
        payload = resp.json()
    except ValueError:
        return 1
    parameters = payload.get("parameters") if isinstance(payload, dict) else None
    if not isinstance(parameters, dict):
        return 1
    try:
        return int(parameters.get("retry_after", 1))
    except (TypeError, ValueError):
        return 1
