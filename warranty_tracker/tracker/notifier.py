from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from warranty_tracker.schemas.ticket import TicketStatus
from warranty_tracker.services.timeline import get_status_config
from warranty_tracker.utils.time import utc_now

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_SIZE = 10
NOTIFICATION_TITLE = "Warranty Ticket Update"

# (title, body, tag) -> None; stands in for the platform's notification API.
NativeNotificationSink = Callable[[str, str, str], None]
PermissionRequester = Callable[[], Awaitable[str]]


@dataclass
class StatusChangeNotification:
    id: str
    ticket_id: int
    old_status: TicketStatus
    new_status: TicketStatus
    message: str
    timestamp: datetime = field(default_factory=utc_now)
    read: bool = False


def build_status_change_notification(
    ticket_id: int,
    old_status: TicketStatus,
    new_status: TicketStatus,
) -> StatusChangeNotification:
    old_label = get_status_config(old_status).label
    new_label = get_status_config(new_status).label
    timestamp = utc_now()
    return StatusChangeNotification(
        id=f"{ticket_id}-{int(timestamp.timestamp() * 1000)}",
        ticket_id=ticket_id,
        old_status=TicketStatus(old_status),
        new_status=TicketStatus(new_status),
        message=f'Your warranty ticket status changed from "{old_label}" to "{new_label}"',
        timestamp=timestamp,
    )


class StatusChangeNotifier:
    def __init__(
        self,
        initial_status: TicketStatus | None = None,
        capacity: int = DEFAULT_HISTORY_SIZE,
        sink: NativeNotificationSink | None = None,
        permission: str = "default",
        enabled: bool = True,
    ) -> None:
        self.last_status = initial_status
        self.capacity = capacity
        self.sink = sink
        self.permission = permission
        self.enabled = enabled
        self.notifications: list[StatusChangeNotification] = []
        self.unread_count = 0

    def observe(self, ticket_id: int, status: TicketStatus) -> StatusChangeNotification | None:
        """Record a freshly fetched status; returns the notification if it changed."""
        previous = self.last_status
        self.last_status = status
        if previous is None or previous == status:
            return None
        notification = build_status_change_notification(ticket_id, previous, status)
        self.add(notification)
        return notification

    def add(self, notification: StatusChangeNotification) -> None:
        self.notifications = [notification, *self.notifications[: self.capacity - 1]]
        self.unread_count += 1
        if self.enabled and self.permission == "granted" and self.sink is not None:
            self.sink(NOTIFICATION_TITLE, notification.message, f"ticket-{notification.ticket_id}")
        logger.info(
            "status_changed",
            ticket_id=notification.ticket_id,
            old_status=notification.old_status.value,
            new_status=notification.new_status.value,
        )

    def mark_all_read(self) -> None:
        for notification in self.notifications:
            notification.read = True
        self.unread_count = 0

    async def toggle(self, request_permission: PermissionRequester | None = None) -> bool:
        """Flip notifications on or off; turning on asks for permission first if undecided."""
        if not self.enabled and self.permission == "default" and request_permission is not None:
            self.permission = await request_permission()
            if self.permission != "granted":
                return self.enabled
        self.enabled = not self.enabled
        return self.enabled
