from __future__ import annotations

import os
import re
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from .constants import BINANCE_API_URL, STARTUP_DELAY_SECONDS, TOKEN_PLACEHOLDER
from .models import Config


def load_config(path: str) -> Config:
    raw: dict[str, Any] = {}
    p = Path(path)
    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

    telegram = raw.get("telegram", {})
    binance = raw.get("binance", {})

    cfg = Config(
        dry_run=bool(raw.get("dry_run", False)),
        telegram_token_env=str(telegram.get("token_env", "TELEGRAM_BOT_TOKEN")),
        telegram_token=str(telegram.get("token", "")),
        poll_timeout=int(telegram.get("poll_timeout", 25)),
        binance_base_url=str(binance.get("base_url", BINANCE_API_URL)),
        binance_timeout=int(binance.get("timeout", 15)),
        startup_delay=float(raw.get("startup_delay", STARTUP_DELAY_SECONDS)),
    )

    return cfg


def resolve_secret(env_name: str, literal: str) -> str:
    # Prefer environment variable value when present.
    if env_name and env_name in os.environ:
        return os.environ[env_name]
    if literal:
        return literal
    # Some configs put the token itself under token_env.
    if env_name and not _looks_like_env_name(env_name):
        return env_name
    return ""


def require_token(token: str) -> str:
    token = token.strip()
    if not token or token == TOKEN_PLACEHOLDER:
        raise SystemExit(
            "Missing Telegram bot token: set TELEGRAM_BOT_TOKEN or telegram.token in the config file"
        )
    return token


def _looks_like_env_name(value: str) -> bool:
    return bool(re.fullmatch(r"[A-Z_][A-Z0-9_]*", value))


def to_dict(cfg: Config) -> dict[str, Any]:
    data = asdict(cfg)
    if data.get("telegram_token"):
        data["telegram_token"] = "***"
    return data
