from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import structlog

logger = structlog.get_logger(__name__)

Callback = Callable[[], Awaitable[None]]
ConnectivityListener = Callable[[bool], None]


class Scheduler(Protocol):
    def start(self, interval: float, callback: Callback) -> Any: ...

    def call_later(self, delay: float, callback: Callback) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class ConnectivityObserver(Protocol):
    @property
    def is_online(self) -> bool: ...

    def on_change(self, callback: ConnectivityListener) -> Callable[[], None]: ...


class AsyncioScheduler:
    """Timers as tasks on the running event loop. Intervals are in seconds."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def start(self, interval: float, callback: Callback) -> asyncio.Task:
        async def _repeat() -> None:
            while True:
                await asyncio.sleep(interval)
                try:
                    await callback()
                except Exception:
                    # One failed tick must not end the timer.
                    logger.exception("errors", stage="scheduled_tick")

        return self._spawn(_repeat())

    def call_later(self, delay: float, callback: Callback) -> asyncio.Task:
        async def _once() -> None:
            await asyncio.sleep(delay)
            await callback()

        return self._spawn(_once())

    def cancel(self, handle: asyncio.Task | None) -> None:
        if handle is not None and not handle.done():
            handle.cancel()

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.done())

    async def shutdown(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


class ConnectivityMonitor:
    """Online/offline flag pushed by whoever can observe the network."""

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._listeners: list[ConnectivityListener] = []

    @property
    def is_online(self) -> bool:
        return self._online

    def on_change(self, callback: ConnectivityListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def set_online(self, online: bool) -> None:
        if online == self._online:
            return
        self._online = online
        for listener in list(self._listeners):
            listener(online)
