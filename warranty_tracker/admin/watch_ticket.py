from __future__ import annotations

import argparse
import asyncio

from warranty_tracker.tracker.controller import PollingConfig, WarrantyTracker
from warranty_tracker.tracker.errors import ErrorType
from warranty_tracker.tracker.fetcher import TicketFetcher
from warranty_tracker.tracker.formatting import calculate_countdown, format_countdown, format_date
from warranty_tracker.tracker.notifier import StatusChangeNotifier

# Retrying cannot fix these.
TERMINAL_ERRORS = {ErrorType.INVALID_TRACKING_CODE, ErrorType.NOT_FOUND}


def _print_notification(title: str, body: str, tag: str) -> None:
    print(f"[{title}] {body}")


def _print_ticket(tracker: WarrantyTracker) -> None:
    ticket = tracker.state.ticket
    if ticket is None:
        return
    print(f"Ticket #{ticket.id} ({ticket.issue_type}) for {ticket.product.name}")
    print(f"Status: {ticket.status.value}  submitted {format_date(ticket.created_at)}")
    for stage in tracker.timeline:
        print(f"  [{stage.state:>9}] {stage.label}")
    if ticket.appointment is not None:
        countdown = calculate_countdown(ticket.appointment.appointment_date)
        print(
            f"Appointment at {ticket.appointment.service_center or 'service center'}: "
            f"{format_date(ticket.appointment.appointment_date)} ({format_countdown(countdown)})"
        )


async def _watch(tracking_code: str, base_url: str, interval_ms: int) -> None:
    notifier = StatusChangeNotifier(sink=_print_notification, permission="granted")
    tracker = WarrantyTracker(
        tracking_code,
        TicketFetcher(base_url),
        notifier=notifier,
        config=PollingConfig(interval_ms=interval_ms),
    )
    async with tracker:
        last_seen = None
        while True:
            error = tracker.state.error
            if error is not None and not tracker.retry_controller.pending:
                if error.type in TERMINAL_ERRORS:
                    raise SystemExit(error.user_message)
                delay_ms = tracker.retry()
                print(f"{error.user_message} Retrying in {delay_ms / 1000:.0f}s")
            if tracker.state.last_updated != last_seen:
                last_seen = tracker.state.last_updated
                _print_ticket(tracker)
            await asyncio.sleep(1)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Follow a warranty ticket from the terminal.")
    parser.add_argument("tracking_code", help="Ticket tracking code (UUID).")
    parser.add_argument(
        "--base-url",
        default="http://localhost:8000",
        help="Base URL of the tracker API.",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=PollingConfig().interval_ms,
        help="Polling interval in milliseconds.",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    try:
        asyncio.run(_watch(args.tracking_code.strip(), args.base_url, args.interval_ms))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
