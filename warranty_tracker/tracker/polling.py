from __future__ import annotations

from typing import Any, Literal

import structlog

from warranty_tracker.tracker.scheduling import Callback, Scheduler

logger = structlog.get_logger(__name__)

PollingState = Literal["idle", "active"]

DEFAULT_POLL_INTERVAL_MS = 30_000


class PollingController:
    """Owns the repeating refresh timer.

    Active only while there is a ticket, no error, polling is enabled and
    the client is online; any of those turning false drops it to idle.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_tick: Callback,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        self.scheduler = scheduler
        self.on_tick = on_tick
        self.interval_ms = interval_ms
        self._handle: Any = None

    @property
    def state(self) -> PollingState:
        return "active" if self._handle is not None else "idle"

    def sync(self, *, has_ticket: bool, has_error: bool, enabled: bool, online: bool) -> PollingState:
        should_run = has_ticket and not has_error and enabled and online
        if should_run and self._handle is None:
            self._handle = self.scheduler.start(self.interval_ms / 1000, self.on_tick)
            logger.debug("polling_started", interval_ms=self.interval_ms)
        elif not should_run and self._handle is not None:
            self.stop()
        return self.state

    def stop(self) -> None:
        if self._handle is None:
            return
        self.scheduler.cancel(self._handle)
        self._handle = None
        logger.debug("polling_stopped")
