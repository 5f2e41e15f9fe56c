from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from warranty_tracker.schemas.ticket import TicketData, TimelineStage
from warranty_tracker.services.ticket_queries import is_valid_tracking_code
from warranty_tracker.services.timeline import project_ticket_timeline
from warranty_tracker.tracker.backoff import (
    DEFAULT_BACKOFF_MULTIPLIER,
    DEFAULT_BASE_DELAY_MS,
    MAX_BACKOFF_MS,
    RetryController,
)
from warranty_tracker.tracker.cancellation import CancellationToken, FetchCancelled
from warranty_tracker.tracker.errors import ErrorType, TrackerError
from warranty_tracker.tracker.fetcher import TicketFetcher
from warranty_tracker.tracker.notifier import DEFAULT_HISTORY_SIZE, StatusChangeNotifier
from warranty_tracker.tracker.polling import DEFAULT_POLL_INTERVAL_MS, PollingController
from warranty_tracker.tracker.scheduling import (
    AsyncioScheduler,
    ConnectivityMonitor,
    ConnectivityObserver,
    Scheduler,
)
from warranty_tracker.utils.time import utc_now

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PollingConfig:
    interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS
    backoff_multiplier: int = DEFAULT_BACKOFF_MULTIPLIER
    max_delay_ms: int = MAX_BACKOFF_MS
    enabled: bool = True
    notification_history: int = DEFAULT_HISTORY_SIZE


DEFAULT_POLLING_CONFIG = PollingConfig()


@dataclass
class LoadingState:
    is_loading: bool = False
    operation: str | None = None


@dataclass
class TrackerState:
    ticket: TicketData | None = None
    loading: LoadingState = field(default_factory=LoadingState)
    error: TrackerError | None = None
    last_updated: datetime | None = None
    polling_enabled: bool = True


class WarrantyTracker:
    """Keeps one ticket's view fresh.

    At most one fetch is in flight: starting a fetch cancels the token of
    the previous one, and a cancelled fetch never touches state. Background
    polls never raise the loading flag.
    """

    def __init__(
        self,
        tracking_code: str,
        fetcher: TicketFetcher,
        scheduler: Scheduler | None = None,
        connectivity: ConnectivityObserver | None = None,
        notifier: StatusChangeNotifier | None = None,
        initial_data: TicketData | None = None,
        config: PollingConfig = DEFAULT_POLLING_CONFIG,
    ) -> None:
        self.tracking_code = tracking_code
        self.fetcher = fetcher
        self.scheduler = scheduler or AsyncioScheduler()
        self.connectivity = connectivity or ConnectivityMonitor()
        self.config = config
        self.state = TrackerState(ticket=initial_data, polling_enabled=config.enabled)

        initial_status = initial_data.status if initial_data else None
        if notifier is None:
            notifier = StatusChangeNotifier(
                initial_status=initial_status, capacity=config.notification_history
            )
        elif notifier.last_status is None:
            notifier.last_status = initial_status
        self.notifier = notifier

        self.polling = PollingController(self.scheduler, self._poll, config.interval_ms)
        self.retry_controller = RetryController(
            self.scheduler,
            base_delay_ms=config.base_delay_ms,
            multiplier=config.backoff_multiplier,
            max_delay_ms=config.max_delay_ms,
        )
        self._token: CancellationToken | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._closed = False

    async def __aenter__(self) -> "WarrantyTracker":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def is_online(self) -> bool:
        return self.connectivity.is_online

    @property
    def timeline(self) -> list[TimelineStage]:
        if self.state.ticket is None:
            return []
        return project_ticket_timeline(self.state.ticket)

    async def start(self) -> None:
        self._unsubscribe = self.connectivity.on_change(self._on_connectivity_change)
        if self.state.ticket is None:
            await self.fetch_ticket_data()
        else:
            self._sync_polling()

    async def fetch_ticket_data(
        self, show_loading: bool = True, is_polling: bool = False
    ) -> TicketData | None:
        if not is_valid_tracking_code(self.tracking_code):
            self._set_error(
                TrackerError(
                    ErrorType.INVALID_TRACKING_CODE,
                    "Invalid tracking code format",
                    "The tracking code must be a valid UUID format",
                )
            )
            return None

        if self._token is not None:
            self._token.cancel()
        token = CancellationToken()
        self._token = token

        if show_loading:
            self.state.loading = LoadingState(
                is_loading=True,
                operation="Checking for updates..." if is_polling else "Fetching ticket data...",
            )
            self.state.error = None

        try:
            ticket = await self.fetcher.fetch(self.tracking_code, token)
            token.raise_if_cancelled()
            # Ticket lands before the notifier runs so both agree on the status.
            self.state.ticket = ticket
            self.state.last_updated = utc_now()
            self.notifier.observe(ticket.id, ticket.status)
        except FetchCancelled:
            return None
        except TrackerError as exc:
            if token.cancelled:
                return None
            self._set_error(exc)
            return None
        except Exception:
            logger.exception("errors", stage="ticket_fetch", tracking_code=self.tracking_code)
            if token.cancelled:
                return None
            self._set_error(
                TrackerError(
                    ErrorType.NETWORK_ERROR,
                    "Unexpected error while fetching ticket",
                    "An unexpected error occurred",
                )
            )
            return None
        finally:
            if self._token is token:
                self._token = None

        self.state.loading = LoadingState()
        self.state.error = None
        self.retry_controller.reset()
        self._sync_polling()
        return ticket

    def retry(self) -> int:
        """Clear the error and refetch after the backoff delay; returns the delay in ms."""
        self.state.error = None
        delay_ms = self.retry_controller.schedule(self.fetch_ticket_data)
        logger.info(
            "ticket_retry_scheduled",
            delay_ms=delay_ms,
            retry_count=self.retry_controller.retry_count,
        )
        self._sync_polling()
        return delay_ms

    def toggle_polling(self, enabled: bool | None = None) -> bool:
        self.state.polling_enabled = (
            not self.state.polling_enabled if enabled is None else enabled
        )
        self._sync_polling()
        return self.state.polling_enabled

    async def close(self) -> None:
        self._closed = True
        self.polling.stop()
        self.retry_controller.cancel()
        if self._token is not None:
            self._token.cancel()
            self._token = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.fetcher.aclose()

    async def _poll(self) -> None:
        await self.fetch_ticket_data(show_loading=False, is_polling=True)

    def _set_error(self, error: TrackerError) -> None:
        logger.warning(
            "ticket_fetch_error",
            error_type=error.type.value,
            message=error.message,
            code=error.code,
        )
        self.state.loading = LoadingState()
        self.state.error = error
        self._sync_polling()

    def _on_connectivity_change(self, online: bool) -> None:
        logger.info("connectivity_changed", online=online)
        self._sync_polling()

    def _sync_polling(self) -> None:
        if self._closed:
            return
        self.polling.sync(
            has_ticket=self.state.ticket is not None,
            has_error=self.state.error is not None,
            enabled=self.state.polling_enabled,
            online=self.connectivity.is_online,
        )
