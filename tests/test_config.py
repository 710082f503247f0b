from __future__ import annotations

import pytest

from rsi_alert_bot.config import load_config, require_token, resolve_secret, to_dict
from rsi_alert_bot.constants import BINANCE_API_URL


def test_resolve_secret_prefers_env(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "from_env")
    assert resolve_secret("TELEGRAM_BOT_TOKEN", "from_config") == "from_env"


def test_resolve_secret_uses_literal_when_env_missing(monkeypatch):
    monkeypatch.delenv("TELEGRAM_BOT_TOKEN", raising=False)
    assert resolve_secret("TELEGRAM_BOT_TOKEN", "from_config") == "from_config"


def test_resolve_secret_empty_when_missing():
    assert resolve_secret("DOES_NOT_EXIST", "") == ""


def test_resolve_secret_accepts_token_in_env_key(monkeypatch):
    token_like = "12345:ABCDE_token_value"
    monkeypatch.delenv(token_like, raising=False)
    assert resolve_secret(token_like, "") == token_like


def test_load_config_defaults_without_file(tmp_path):
    cfg = load_config(str(tmp_path / "missing.yaml"))
    assert cfg.dry_run is False
    assert cfg.telegram_token_env == "TELEGRAM_BOT_TOKEN"
    assert cfg.telegram_token == ""
    assert cfg.poll_timeout == 25
    assert cfg.binance_base_url == BINANCE_API_URL
    assert cfg.binance_timeout == 15
    assert cfg.startup_delay == 2


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "dry_run: true\n"
        "startup_delay: 0.5\n"
        "telegram:\n"
        "  token_env: MY_BOT_TOKEN\n"
        "  token: abc\n"
        "  poll_timeout: 10\n"
        "binance:\n"
        "  base_url: https://api.binance.us/api/v3\n"
        "  timeout: 5\n",
        encoding="utf-8",
    )
    cfg = load_config(str(path))
    assert cfg.dry_run is True
    assert cfg.startup_delay == 0.5
    assert cfg.telegram_token_env == "MY_BOT_TOKEN"
    assert cfg.telegram_token == "abc"
    assert cfg.poll_timeout == 10
    assert cfg.binance_base_url == "https://api.binance.us/api/v3"
    assert cfg.binance_timeout == 5
    assert to_dict(cfg)["telegram_token"] == "***"


def test_empty_yaml_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)).poll_timeout == 25


@pytest.mark.parametrize("token", ["", "   ", "YOUR_TOKEN_HERE"])
def test_require_token_rejects_missing_or_placeholder(token):
    with pytest.raises(SystemExit):
        require_token(token)


def test_require_token_returns_stripped_token():
    assert require_token(" 123:abc ") == "123:abc"


def test_main_exits_cleanly_on_keyboard_interrupt(monkeypatch):
    from rsi_alert_bot import main as main_module

    def _interrupt(args):
        raise KeyboardInterrupt

    monkeypatch.setattr(main_module, "run", _interrupt)
    monkeypatch.setattr(main_module.sys, "argv", ["rsi-alert-bot", "--dry-run"])
    with pytest.raises(SystemExit) as exc:
        main_module.main()
    assert exc.value.code == 0
