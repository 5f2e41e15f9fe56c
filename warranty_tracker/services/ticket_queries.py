from __future__ import annotations

import re
import uuid
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from warranty_tracker.models.manager_action import ManagerAction
from warranty_tracker.models.product import Product
from warranty_tracker.models.purchase import Purchase
from warranty_tracker.models.service_appointment import ServiceAppointment
from warranty_tracker.models.ticket import Ticket
from warranty_tracker.models.user import User
from warranty_tracker.schemas.ticket import (
    ManagerActionData,
    ProductData,
    PurchaseData,
    ServiceAppointmentData,
    TicketData,
    TicketStatus,
    TrackingCodeSummary,
    UserData,
)

logger = structlog.get_logger(__name__)

TRACKING_CODE_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


class TicketQueryError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


def is_valid_tracking_code(tracking_code: Any) -> bool:
    return isinstance(tracking_code, str) and bool(TRACKING_CODE_RE.match(tracking_code))


def _validated_code(tracking_code: Any) -> uuid.UUID:
    if not tracking_code or not isinstance(tracking_code, str) or not tracking_code.strip():
        raise TicketQueryError("Tracking code is required", "INVALID_INPUT")
    if not is_valid_tracking_code(tracking_code):
        raise TicketQueryError("Invalid tracking code format", "INVALID_FORMAT")
    return uuid.UUID(tracking_code)


def build_ticket_data(
    ticket: Ticket,
    user: User,
    purchase: Purchase,
    product: Product,
    manager_action: ManagerAction | None = None,
    appointment: ServiceAppointment | None = None,
) -> TicketData:
    data = TicketData(
        id=ticket.id,
        tracking_code=ticket.tracking_code,
        status=TicketStatus(ticket.status or TicketStatus.PENDING),
        issue_type=ticket.issue_type,
        description=ticket.description,
        created_at=ticket.created_at,
        user=UserData.model_validate(user),
        product=ProductData.model_validate(product),
        purchase=PurchaseData.model_validate(purchase),
    )
    # Absent until the back office has acted; not an error.
    if (
        manager_action is not None
        and manager_action.approved is not None
        and manager_action.action_date
    ):
        data.manager_action = ManagerActionData.model_validate(manager_action)
    if appointment is not None and appointment.appointment_date:
        data.appointment = ServiceAppointmentData.model_validate(appointment)
    return data


async def get_ticket_by_tracking_code(session: AsyncSession, tracking_code: Any) -> TicketData:
    code = _validated_code(tracking_code)

    query = (
        select(Ticket, User, Purchase, Product, ManagerAction, ServiceAppointment)
        .join(User, Ticket.user_id == User.id)
        .join(Purchase, Ticket.purchase_id == Purchase.id)
        .join(Product, Purchase.product_id == Product.id)
        .outerjoin(ManagerAction, ManagerAction.ticket_id == Ticket.id)
        .outerjoin(ServiceAppointment, ServiceAppointment.ticket_id == Ticket.id)
        .where(Ticket.tracking_code == code)
        .limit(1)
    )
    try:
        result = await session.execute(query)
        row = result.first()
    except SQLAlchemyError as exc:
        logger.error("errors", stage="ticket_lookup", error=str(exc))
        raise TicketQueryError("Failed to fetch ticket data", "DATABASE_ERROR") from exc

    if row is None:
        raise TicketQueryError("Ticket not found", "NOT_FOUND")
    try:
        return build_ticket_data(*row)
    except ValueError as exc:
        # Stored row the wire types cannot represent, e.g. an unknown status.
        logger.error("errors", stage="ticket_build", error=str(exc))
        raise TicketQueryError("Failed to fetch ticket data", "DATABASE_ERROR") from exc


async def tracking_code_exists(session: AsyncSession, tracking_code: Any) -> bool:
    if not is_valid_tracking_code(tracking_code):
        return False
    try:
        found = await session.scalar(
            select(Ticket.id).where(Ticket.tracking_code == uuid.UUID(tracking_code)).limit(1)
        )
    except SQLAlchemyError as exc:
        logger.error("errors", stage="tracking_code_exists", error=str(exc))
        return False
    return found is not None


async def get_ticket_status(session: AsyncSession, tracking_code: Any) -> dict | None:
    """Lightweight status probe; ``None`` for unknown codes or lookup failures."""
    if not is_valid_tracking_code(tracking_code):
        return None
    try:
        result = await session.execute(
            select(Ticket.id, Ticket.status)
            .where(Ticket.tracking_code == uuid.UUID(tracking_code))
            .limit(1)
        )
        row = result.first()
    except SQLAlchemyError as exc:
        logger.error("errors", stage="ticket_status", error=str(exc))
        return None
    if row is None:
        return None
    return {"id": row.id, "status": row.status or TicketStatus.PENDING.value}


async def list_tracking_codes(session: AsyncSession) -> list[TrackingCodeSummary]:
    result = await session.execute(
        select(Ticket.tracking_code, Ticket.status, Ticket.created_at, Ticket.issue_type)
        .order_by(Ticket.created_at)
    )
    return [TrackingCodeSummary.model_validate(row) for row in result.all()]
