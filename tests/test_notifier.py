import asyncio

from warranty_tracker.schemas.ticket import TicketStatus
from warranty_tracker.tracker.notifier import (
    StatusChangeNotifier,
    build_status_change_notification,
)


def test_notification_message_uses_status_labels() -> None:
    notification = build_status_change_notification(
        42, TicketStatus.APPROVED, TicketStatus.SCHEDULED
    )

    assert notification.message == (
        'Your warranty ticket status changed from "Approved" to "Service Scheduled"'
    )
    assert notification.id.startswith("42-")
    assert notification.read is False


def test_first_observation_is_silent() -> None:
    notifier = StatusChangeNotifier()

    assert notifier.observe(42, TicketStatus.PENDING) is None
    assert notifier.last_status == TicketStatus.PENDING
    assert notifier.unread_count == 0


def test_unchanged_status_is_silent() -> None:
    notifier = StatusChangeNotifier(initial_status=TicketStatus.VALIDATED)

    assert notifier.observe(42, TicketStatus.VALIDATED) is None
    assert notifier.notifications == []


def test_history_is_newest_first_and_capped() -> None:
    notifier = StatusChangeNotifier(initial_status=TicketStatus.PENDING, capacity=3)
    sequence = [
        TicketStatus.VALIDATED,
        TicketStatus.MANAGER_REVIEW,
        TicketStatus.APPROVED,
        TicketStatus.SCHEDULED,
    ]
    for status in sequence:
        notifier.observe(42, status)

    assert [n.new_status for n in notifier.notifications] == [
        TicketStatus.SCHEDULED,
        TicketStatus.APPROVED,
        TicketStatus.MANAGER_REVIEW,
    ]
    assert notifier.unread_count == 4

    notifier.mark_all_read()

    assert notifier.unread_count == 0
    assert all(n.read for n in notifier.notifications)


def test_native_sink_needs_permission_and_enabled() -> None:
    delivered: list[tuple[str, str, str]] = []
    notifier = StatusChangeNotifier(
        initial_status=TicketStatus.PENDING,
        sink=lambda *args: delivered.append(args),
    )

    notifier.observe(42, TicketStatus.VALIDATED)
    assert delivered == []

    notifier.permission = "granted"
    notifier.observe(42, TicketStatus.MANAGER_REVIEW)

    assert delivered == [
        (
            "Warranty Ticket Update",
            'Your warranty ticket status changed from "Under Review" to "Manager Review"',
            "ticket-42",
        )
    ]

    notifier.enabled = False
    notifier.observe(42, TicketStatus.REJECTED)
    assert len(delivered) == 1
    assert notifier.unread_count == 3


def test_toggle_asks_permission_when_enabling() -> None:
    async def grant() -> str:
        return "granted"

    async def deny() -> str:
        return "denied"

    notifier = StatusChangeNotifier(enabled=False)
    assert asyncio.run(notifier.toggle(deny)) is False
    assert notifier.permission == "denied"

    notifier = StatusChangeNotifier(enabled=False)
    assert asyncio.run(notifier.toggle(grant)) is True
    assert notifier.permission == "granted"
    assert asyncio.run(notifier.toggle(grant)) is False
