from __future__ import annotations

from typing import Any

from warranty_tracker.tracker.scheduling import Callback, Scheduler

DEFAULT_BASE_DELAY_MS = 1_000
DEFAULT_BACKOFF_MULTIPLIER = 2
MAX_BACKOFF_MS = 300_000


def calculate_backoff_interval(
    base_interval: int,
    retry_count: int,
    multiplier: int = DEFAULT_BACKOFF_MULTIPLIER,
    max_interval: int = MAX_BACKOFF_MS,
) -> int:
    return min(base_interval * multiplier**retry_count, max_interval)


class RetryController:
    def __init__(
        self,
        scheduler: Scheduler,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        multiplier: int = DEFAULT_BACKOFF_MULTIPLIER,
        max_delay_ms: int = MAX_BACKOFF_MS,
    ) -> None:
        self.scheduler = scheduler
        self.base_delay_ms = base_delay_ms
        self.multiplier = multiplier
        self.max_delay_ms = max_delay_ms
        self.retry_count = 0
        self._handle: Any = None

    def next_delay_ms(self) -> int:
        return calculate_backoff_interval(
            self.base_delay_ms, self.retry_count, self.multiplier, self.max_delay_ms
        )

    def schedule(self, callback: Callback) -> int:
        """Schedule ``callback`` after the current backoff delay; returns the delay in ms.

        The delay is taken before the count moves, so the first retry waits
        ``base_delay_ms``. A retry still waiting is replaced.
        """
        delay_ms = self.next_delay_ms()
        self.retry_count += 1
        self.cancel()

        async def _fire() -> None:
            # Once fired, a superseded fetch is stopped by its token, not by the timer.
            self._handle = None
            await callback()

        self._handle = self.scheduler.call_later(delay_ms / 1000, _fire)
        return delay_ms

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def reset(self) -> None:
        self.retry_count = 0

    def cancel(self) -> None:
        if self._handle is not None:
            self.scheduler.cancel(self._handle)
            self._handle = None
