import asyncio

from conftest import TRACKING_CODE, ManualScheduler, make_ticket
from warranty_tracker.tracker import (
    AsyncioScheduler,
    ConnectivityMonitor,
    ErrorType,
    PollingConfig,
    StatusChangeNotifier,
    TrackerError,
    WarrantyTracker,
)


class ScriptedFetcher:
    """Plays back queued outcomes; holds each call on ``gate`` when one is set."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.tokens = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    async def fetch(self, tracking_code, token):
        self.tokens.append(token)
        outcome = self.outcomes.pop(0)
        gate = self.gate
        if gate is not None:
            await gate.wait()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def aclose(self) -> None:
        self.closed = True


def _network_error() -> TrackerError:
    return TrackerError(ErrorType.NETWORK_ERROR, "Network connection error")


def test_newer_fetch_supersedes_older_one() -> None:
    async def scenario():
        fetcher = ScriptedFetcher(make_ticket("pending"), make_ticket("validated"))
        tracker = WarrantyTracker(TRACKING_CODE, fetcher, scheduler=ManualScheduler())
        fetcher.gate = asyncio.Event()
        gate = fetcher.gate
        older = asyncio.create_task(tracker.fetch_ticket_data())
        await asyncio.sleep(0)

        fetcher.gate = None
        newer = await tracker.fetch_ticket_data()
        gate.set()
        return tracker, fetcher, await older, newer

    tracker, fetcher, older, newer = asyncio.run(scenario())

    assert older is None
    assert newer.status == "validated"
    assert tracker.state.ticket.status == "validated"
    assert fetcher.tokens[0].cancelled is True
    assert fetcher.tokens[1].cancelled is False
    assert tracker.notifier.unread_count == 0


def test_cancelled_failure_is_not_user_visible() -> None:
    async def scenario():
        fetcher = ScriptedFetcher(_network_error(), make_ticket("pending"))
        tracker = WarrantyTracker(TRACKING_CODE, fetcher, scheduler=ManualScheduler())
        fetcher.gate = asyncio.Event()
        gate = fetcher.gate
        older = asyncio.create_task(tracker.fetch_ticket_data())
        await asyncio.sleep(0)

        fetcher.gate = None
        await tracker.fetch_ticket_data()
        gate.set()
        await older
        return tracker

    tracker = asyncio.run(scenario())

    assert tracker.state.error is None
    assert tracker.state.ticket.status == "pending"


def test_loading_flag_only_for_foreground_fetch() -> None:
    async def scenario():
        fetcher = ScriptedFetcher(make_ticket("pending"), make_ticket("pending"))
        scheduler = ManualScheduler()
        tracker = WarrantyTracker(TRACKING_CODE, fetcher, scheduler=scheduler)
        fetcher.gate = asyncio.Event()

        foreground = asyncio.create_task(tracker.fetch_ticket_data())
        await asyncio.sleep(0)
        during_foreground = tracker.state.loading
        fetcher.gate.set()
        await foreground

        fetcher.gate = asyncio.Event()
        poll = asyncio.create_task(scheduler.tick())
        await asyncio.sleep(0)
        during_poll = tracker.state.loading
        fetcher.gate.set()
        await poll
        return during_foreground, during_poll, tracker

    during_foreground, during_poll, tracker = asyncio.run(scenario())

    assert during_foreground.is_loading is True
    assert during_foreground.operation == "Fetching ticket data..."
    assert during_poll.is_loading is False
    assert tracker.state.loading.is_loading is False
    assert tracker.state.last_updated is not None


def test_invalid_code_fails_without_fetching() -> None:
    fetcher = ScriptedFetcher()
    tracker = WarrantyTracker("not-a-code", fetcher, scheduler=ManualScheduler())

    assert asyncio.run(tracker.fetch_ticket_data()) is None
    assert tracker.state.error.type == ErrorType.INVALID_TRACKING_CODE
    assert fetcher.tokens == []


def test_status_changes_raise_notifications() -> None:
    async def scenario():
        fetcher = ScriptedFetcher(
            make_ticket("validated"), make_ticket("validated"), make_ticket("manager_review")
        )
        tracker = WarrantyTracker(
            TRACKING_CODE,
            fetcher,
            scheduler=ManualScheduler(),
            initial_data=make_ticket("pending"),
        )
        await tracker.fetch_ticket_data()
        first = tracker.notifier.unread_count
        await tracker.fetch_ticket_data()
        second = tracker.notifier.unread_count
        await tracker.fetch_ticket_data()
        return tracker, first, second

    tracker, first, second = asyncio.run(scenario())

    assert (first, second, tracker.notifier.unread_count) == (1, 1, 2)
    latest = tracker.notifier.notifications[0]
    assert latest.message == (
        'Your warranty ticket status changed from "Under Review" to "Manager Review"'
    )
    assert tracker.notifier.notifications[1].old_status == "pending"


def test_polling_follows_ticket_error_toggle_and_connectivity() -> None:
    async def scenario():
        scheduler = ManualScheduler()
        connectivity = ConnectivityMonitor()
        fetcher = ScriptedFetcher(make_ticket("pending"), _network_error())
        tracker = WarrantyTracker(
            TRACKING_CODE, fetcher, scheduler=scheduler, connectivity=connectivity
        )
        states = []
        await tracker.start()
        states.append(tracker.polling.state)

        connectivity.set_online(False)
        states.append(tracker.polling.state)
        connectivity.set_online(True)
        states.append(tracker.polling.state)

        tracker.toggle_polling()
        states.append(tracker.polling.state)
        tracker.toggle_polling()
        states.append(tracker.polling.state)

        await scheduler.tick()
        states.append(tracker.polling.state)
        return tracker, scheduler, states

    tracker, scheduler, states = asyncio.run(scenario())

    assert states == ["active", "idle", "active", "idle", "active", "idle"]
    assert tracker.state.error.type == ErrorType.NETWORK_ERROR
    assert scheduler.intervals == {}


def test_polling_uses_configured_interval() -> None:
    async def scenario():
        scheduler = ManualScheduler()
        tracker = WarrantyTracker(
            TRACKING_CODE,
            ScriptedFetcher(),
            scheduler=scheduler,
            initial_data=make_ticket("pending"),
            config=PollingConfig(interval_ms=5_000),
        )
        await tracker.start()
        return scheduler

    scheduler = asyncio.run(scenario())

    assert [interval for interval, _ in scheduler.intervals.values()] == [5.0]


def test_polling_disabled_by_config_stays_idle() -> None:
    async def scenario():
        tracker = WarrantyTracker(
            TRACKING_CODE,
            ScriptedFetcher(make_ticket("pending")),
            scheduler=ManualScheduler(),
            config=PollingConfig(enabled=False),
        )
        await tracker.start()
        return tracker

    assert asyncio.run(scenario()).polling.state == "idle"


def test_retry_backs_off_and_recovers() -> None:
    async def scenario():
        scheduler = ManualScheduler()
        fetcher = ScriptedFetcher(_network_error(), make_ticket("approved"))
        tracker = WarrantyTracker(TRACKING_CODE, fetcher, scheduler=scheduler)
        await tracker.start()
        had_error = tracker.state.error is not None

        delays = [tracker.retry() for _ in range(4)]
        error_after_retry = tracker.state.error
        queued = [delay for delay, _ in scheduler.delayed.values()]

        await scheduler.run_delayed()
        return tracker, had_error, delays, error_after_retry, queued

    tracker, had_error, delays, error_after_retry, queued = asyncio.run(scenario())

    assert had_error is True
    assert delays == [1000, 2000, 4000, 8000]
    assert error_after_retry is None
    assert queued == [8.0]
    assert tracker.state.ticket.status == "approved"
    assert tracker.retry_controller.retry_count == 0
    assert tracker.polling.state == "active"


def test_close_tears_down_timers_and_in_flight_fetch() -> None:
    async def scenario():
        scheduler = ManualScheduler()
        connectivity = ConnectivityMonitor()
        fetcher = ScriptedFetcher(make_ticket("validated"))
        tracker = WarrantyTracker(
            TRACKING_CODE,
            fetcher,
            scheduler=scheduler,
            connectivity=connectivity,
            initial_data=make_ticket("pending"),
        )
        await tracker.start()
        tracker.retry()

        fetcher.gate = asyncio.Event()
        in_flight = asyncio.create_task(tracker.fetch_ticket_data(show_loading=False))
        await asyncio.sleep(0)

        await tracker.close()
        fetcher.gate.set()
        result = await in_flight
        connectivity.set_online(False)
        connectivity.set_online(True)
        return tracker, scheduler, fetcher, result

    tracker, scheduler, fetcher, result = asyncio.run(scenario())

    assert result is None
    assert tracker.state.ticket.status == "pending"
    assert scheduler.intervals == {}
    assert scheduler.delayed == {}
    assert fetcher.tokens[0].cancelled is True
    assert fetcher.closed is True
    assert tracker.polling.state == "idle"


def test_notifier_passed_in_inherits_initial_status() -> None:
    notifier = StatusChangeNotifier()
    tracker = WarrantyTracker(
        TRACKING_CODE,
        ScriptedFetcher(),
        scheduler=ManualScheduler(),
        notifier=notifier,
        initial_data=make_ticket("approved"),
    )

    assert tracker.notifier is notifier
    assert notifier.last_status == "approved"


def test_unexpected_poll_failure_becomes_error_and_stops_polling() -> None:
    async def scenario():
        scheduler = AsyncioScheduler()
        fetcher = ScriptedFetcher(RuntimeError("unexpected failure"))
        tracker = WarrantyTracker(
            TRACKING_CODE,
            fetcher,
            scheduler=scheduler,
            initial_data=make_ticket("pending"),
            config=PollingConfig(interval_ms=20),
        )
        await tracker.start()
        await asyncio.sleep(0.2)
        live_timers = scheduler.pending
        await tracker.close()
        await scheduler.shutdown()
        return tracker, fetcher, live_timers

    tracker, fetcher, live_timers = asyncio.run(scenario())

    assert len(fetcher.tokens) == 1
    assert tracker.state.error.type == ErrorType.NETWORK_ERROR
    assert tracker.polling.state == "idle"
    assert live_timers == 0


def test_failing_notification_sink_leaves_consistent_state() -> None:
    def broken_sink(title: str, body: str, tag: str) -> None:
        raise RuntimeError("notification service unavailable")

    notifier = StatusChangeNotifier(
        initial_status="pending", sink=broken_sink, permission="granted"
    )
    tracker = WarrantyTracker(
        TRACKING_CODE,
        ScriptedFetcher(make_ticket("validated")),
        scheduler=ManualScheduler(),
        notifier=notifier,
    )

    assert asyncio.run(tracker.fetch_ticket_data()) is None
    assert tracker.state.loading.is_loading is False
    assert tracker.state.error.type == ErrorType.NETWORK_ERROR
    assert tracker.state.ticket.status == notifier.last_status == "validated"
    assert tracker.polling.state == "idle"


def test_second_retry_does_not_abort_fired_retry() -> None:
    async def scenario():
        scheduler = AsyncioScheduler()
        fetcher = ScriptedFetcher(_network_error(), make_ticket("approved"))
        tracker = WarrantyTracker(
            TRACKING_CODE,
            fetcher,
            scheduler=scheduler,
            config=PollingConfig(base_delay_ms=1, backoff_multiplier=1000),
        )
        await tracker.start()

        fetcher.gate = asyncio.Event()
        tracker.retry()
        await asyncio.sleep(0.05)
        loading_in_flight = tracker.state.loading.is_loading

        # Second delay is a full second; the fired retry has to finish on its own.
        tracker.retry()
        fetcher.gate.set()
        await asyncio.sleep(0.05)
        snapshot = (tracker.state.loading.is_loading, tracker.state.ticket, tracker.state.error)

        await tracker.close()
        await scheduler.shutdown()
        return loading_in_flight, snapshot

    loading_in_flight, (is_loading, ticket, error) = asyncio.run(scenario())

    assert loading_in_flight is True
    assert is_loading is False
    assert ticket.status == "approved"
    assert error is None
