from warranty_tracker.tracker.backoff import RetryController, calculate_backoff_interval
from warranty_tracker.tracker.cancellation import CancellationToken, FetchCancelled
from warranty_tracker.tracker.controller import (
    DEFAULT_POLLING_CONFIG,
    LoadingState,
    PollingConfig,
    TrackerState,
    WarrantyTracker,
)
from warranty_tracker.tracker.errors import ErrorType, TrackerError, get_error_message
from warranty_tracker.tracker.fetcher import TicketFetcher
from warranty_tracker.tracker.notifier import StatusChangeNotification, StatusChangeNotifier
from warranty_tracker.tracker.polling import PollingController
from warranty_tracker.tracker.scheduling import AsyncioScheduler, ConnectivityMonitor

__all__ = [
    "AsyncioScheduler",
    "CancellationToken",
    "ConnectivityMonitor",
    "DEFAULT_POLLING_CONFIG",
    "ErrorType",
    "FetchCancelled",
    "LoadingState",
    "PollingConfig",
    "PollingController",
    "RetryController",
    "StatusChangeNotification",
    "StatusChangeNotifier",
    "TicketFetcher",
    "TrackerError",
    "TrackerState",
    "WarrantyTracker",
    "calculate_backoff_interval",
    "get_error_message",
]
