from __future__ import annotations

import argparse
import logging
import sys

from .binance import BinanceClient
from .commands import CommandRouter
from .config import load_config, require_token, resolve_secret, to_dict
from .constants import (
    ALERT_COOLDOWN_SECONDS,
    CHECK_INTERVAL_SECONDS,
    INTERVAL,
    RSI_PERIOD,
    SYMBOL,
)
from .dispatcher import Dispatcher
from .logging_utils import setup_logging
from .monitor import Monitor
from .registry import SubscriberRegistry
from .scheduler import Supervisor
from .telegram import TelegramClient, TelegramError


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"RSI alert bot for {SYMBOL}")
    parser.add_argument("--config", default="config.yaml")
    parser.add_argument("--once", action="store_true", help="Run a single monitor cycle and exit")
    parser.add_argument("--dry-run", action="store_true", help="Log outgoing messages instead of sending them")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--json-logs", action="store_true")
    return parser


def run(args: argparse.Namespace) -> None:
    logger = logging.getLogger("rsi_alert_bot")

    cfg = load_config(args.config)
    if args.dry_run:
        cfg.dry_run = True

    token = resolve_secret(cfg.telegram_token_env, cfg.telegram_token)
    if not cfg.dry_run:
        token = require_token(token)

    logger.info(
        "startup symbol=%s interval=%s rsi_period=%d check_interval_seconds=%d cooldown_seconds=%d",
        SYMBOL,
        INTERVAL,
        RSI_PERIOD,
        CHECK_INTERVAL_SECONDS,
        ALERT_COOLDOWN_SECONDS,
    )
    logger.debug("config %s", to_dict(cfg))

    telegram = TelegramClient(token=token, dry_run=cfg.dry_run)
    try:
        me = telegram.get_me()
    except TelegramError as exc:
        raise SystemExit(f"Could not connect to Telegram, check the bot token: {exc}") from exc
    logger.info("telegram_connected username=%s id=%s dry_run=%s", me.get("username"), me.get("id"), str(cfg.dry_run).lower())

    registry = SubscriberRegistry()
    market = BinanceClient(base_url=cfg.binance_base_url, timeout=cfg.binance_timeout)
    dispatcher = Dispatcher(telegram, registry)
    monitor = Monitor(market, registry, dispatcher)

    if args.once:
        result = monitor.run_cycle()
        if result.reading is None:
            raise SystemExit(f"RSI unavailable: {result.error}")
        if not args.json_logs:
            print(f"RSI={result.reading.value:.2f} Price={result.reading.price:.2f}")
        return

    router = CommandRouter(telegram, registry, monitor)
    supervisor = Supervisor(
        monitor,
        router,
        telegram,
        startup_delay=cfg.startup_delay,
        poll_timeout=cfg.poll_timeout,
    )
    supervisor.run()


def main() -> None:
    args = build_arg_parser().parse_args()
    setup_logging(level=args.log_level, json_logs=args.json_logs)
    try:
        run(args)
    except KeyboardInterrupt:
        logging.getLogger("rsi_alert_bot").info("shutdown reason=keyboard_interrupt")
        sys.exit(0)


if __name__ == "__main__":
    main()
