from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .commands import CommandRouter
from .constants import CHECK_INTERVAL_SECONDS, STARTUP_DELAY_SECONDS
from .monitor import Monitor
from .telegram import TelegramClient, TelegramError

logger = logging.getLogger("rsi_alert_bot.scheduler")

POLL_ERROR_PAUSE_SECONDS = 3.0


class Ticker:
    """Fixed-delay timer: the next run is due ``interval`` after the last one finished."""

    def __init__(self, interval: float, clock: Callable[[], float], first_delay: float = 0.0) -> None:
        self.interval = interval
        self.clock = clock
        self.next_run = clock() + first_delay

    def remaining(self) -> float:
        return max(0.0, self.next_run - self.clock())

    def due(self) -> bool:
        return self.clock() >= self.next_run

    def reschedule(self) -> None:
        self.next_run = self.clock() + self.interval


class Supervisor:
    """Single-threaded bot loop.

    Alternates between long-polling Telegram for commands and running a
    monitor cycle whenever the ticker is due. Commands are handled between
    cycles, so a subscriber's config is never mutated while an alert for it
    is being dispatched.
    """

    def __init__(
        self,
        monitor: Monitor,
        router: CommandRouter,
        telegram: TelegramClient,
        interval: float = CHECK_INTERVAL_SECONDS,
        startup_delay: float = STARTUP_DELAY_SECONDS,
        poll_timeout: int = 25,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.monitor = monitor
        self.router = router
        self.telegram = telegram
        self.interval = interval
        self.startup_delay = startup_delay
        self.poll_timeout = poll_timeout
        self.clock = clock
        self.sleep = sleep
        self.cycles = 0
        self._running = False

    def stop(self) -> None:
        self._running = False

    def run(self, max_cycles: Optional[int] = None) -> None:
        logger.info(
            "scheduler_started interval_seconds=%s startup_delay_seconds=%s",
            self.interval,
            self.startup_delay,
        )
        ticker = Ticker(self.interval, self.clock, first_delay=self.startup_delay)
        self._running = True
        while self._running:
            if ticker.due():
                self._run_cycle()
                ticker.reschedule()
                if max_cycles is not None and self.cycles >= max_cycles:
                    break
                continue
            self._poll(ticker)
        self._running = False
        logger.info("scheduler_stopped cycles=%d", self.cycles)

    def _run_cycle(self) -> None:
        self.cycles += 1
        try:
            self.monitor.run_cycle()
        except Exception:
            logger.exception("scheduler_task_failed cycle=%d", self.cycles)

    def _poll(self, ticker: Ticker) -> None:
        wait = ticker.remaining()
        timeout = min(self.poll_timeout, int(wait))
        if timeout < 1:
            self.sleep(wait)
            return
        try:
            updates = self.telegram.get_updates(timeout=timeout)
        except TelegramError as exc:
            logger.warning("poll_failed error=%s", str(exc))
            self.sleep(min(ticker.remaining(), POLL_ERROR_PAUSE_SECONDS))
            return

        for update in updates:
            try:
                self.router.handle_update(update)
            except Exception:
                logger.exception("command_failed update_id=%s", update.get("update_id"))
