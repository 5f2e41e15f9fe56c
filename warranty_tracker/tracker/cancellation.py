from __future__ import annotations


class FetchCancelled(Exception):
    """Raised inside a fetch whose token was cancelled. Never user-visible."""


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise FetchCancelled()
