"""Periodic triggers for the session refresh and balance top-up sweeps."""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional

from labelbot.config.models import SchedulerConfig
from labelbot.core.services.funding import BalanceTopUp
from labelbot.core.services.session_refresh import SessionRefresher
from labelbot.infrastructure.logging import get_logger


class PeriodicTrigger:
    """Runs ``action`` every ``interval`` seconds until stopped."""

    def __init__(
        self,
        name: str,
        interval: float,
        action: Callable[[], Any],
        *,
        run_immediately: bool = False,
        logger=None,
    ):
        self.name = name
        self.interval = interval
        self.action = action
        self.run_immediately = run_immediately
        self.runs = 0
        self.failures = 0
        self.logger = (logger or get_logger()).bind(trigger=name)

    def run_once(self) -> bool:
        """Run the action once; a failure is logged and reported as ``False``."""

        self.runs += 1
        try:
            self.action()
        except Exception as e:
            self.failures += 1
            self.logger.exception("Scheduled run failed", error=str(e))
            return False
        return True

    def loop(self, stop: threading.Event) -> None:
        if self.run_immediately and not stop.is_set():
            self.run_once()
        while not stop.wait(self.interval):
            self.run_once()


class Scheduler:
    """Owns the refresh trigger and the top-up trigger."""

    def __init__(
        self,
        refresher: SessionRefresher,
        top_up: BalanceTopUp,
        config: Optional[SchedulerConfig] = None,
        *,
        logger=None,
    ):
        self.config = config or SchedulerConfig()
        self.logger = (logger or get_logger()).bind(component="scheduler")
        self.triggers = [
            PeriodicTrigger(
                "session-refresh",
                self.config.refresh_interval_seconds,
                refresher.schedule_refresh,
                run_immediately=self.config.refresh_on_start,
                logger=self.logger,
            ),
            PeriodicTrigger(
                "balance-topup",
                self.config.topup_interval_seconds,
                top_up.run,
                logger=self.logger,
            ),
        ]
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        if self._threads:
            return
        self._stop.clear()
        for trigger in self.triggers:
            thread = threading.Thread(target=trigger.loop, args=(self._stop,), name=trigger.name, daemon=True)
            thread.start()
            self._threads.append(thread)
        self.logger.info(
            "Scheduler started",
            refresh_every=self.config.refresh_interval_seconds,
            topup_every=self.config.topup_interval_seconds,
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout)
        self._threads.clear()
        self.logger.info("Scheduler stopped")

    def run_forever(self) -> None:
        """Block until interrupted."""

        self.start()
        try:
            while not self._stop.wait(1.0):
                pass
        except KeyboardInterrupt:
            self.logger.warning("Interrupted")
        finally:
            self.stop(timeout=5.0)


__all__ = ["PeriodicTrigger", "Scheduler"]
