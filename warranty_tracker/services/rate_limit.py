from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from warranty_tracker.utils.time import utc_now

UNKNOWN_CLIENT_KEY = "unknown"


@dataclass
class RateLimitRecord:
    count: int
    reset_at: datetime


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime


class RateLimitStore(Protocol):
    def get(self, key: str) -> RateLimitRecord | None: ...

    def set(self, key: str, record: RateLimitRecord) -> None: ...

    def delete(self, key: str) -> None: ...

    def items(self) -> Iterable[tuple[str, RateLimitRecord]]: ...


class InMemoryRateLimitStore:
    """Process-local store. Each worker process counts on its own."""

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}

    def get(self, key: str) -> RateLimitRecord | None:
        return self._records.get(key)

    def set(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = record

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def items(self) -> list[tuple[str, RateLimitRecord]]:
        return list(self._records.items())

    def clear(self) -> None:
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


class FixedWindowRateLimiter:
    """Counts requests per key in fixed windows.

    A coarse abuse guard keyed by client address. It is not a security
    control: rotating source addresses gets around it.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        store: RateLimitStore | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.max_requests = max_requests
        self.window = timedelta(seconds=window_seconds)
        self.store: RateLimitStore = store if store is not None else InMemoryRateLimitStore()
        self.clock = clock

    def _sweep(self, now: datetime) -> None:
        stale_before = now - self.window
        for key, record in self.store.items():
            if record.reset_at < stale_before:
                self.store.delete(key)

    def _start_window(self, key: str, now: datetime) -> RateLimitResult:
        record = RateLimitRecord(count=1, reset_at=now + self.window)
        self.store.set(key, record)
        return RateLimitResult(
            allowed=True,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - 1),
            reset_at=record.reset_at,
        )

    def check(self, key: str | None) -> RateLimitResult:
        key = key or UNKNOWN_CLIENT_KEY
        now = self.clock()
        self._sweep(now)

        current = self.store.get(key)
        if current is None or current.reset_at <= now:
            return self._start_window(key, now)

        if current.count >= self.max_requests:
            return RateLimitResult(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                reset_at=current.reset_at,
            )

        current.count += 1
        self.store.set(key, current)
        return RateLimitResult(
            allowed=True,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - current.count),
            reset_at=current.reset_at,
        )

    def snapshot(self, key: str) -> RateLimitRecord | None:
        return self.store.get(key)
