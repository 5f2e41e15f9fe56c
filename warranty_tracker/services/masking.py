from __future__ import annotations

import re

from warranty_tracker.schemas.ticket import TicketData

PROTECTED_PLACEHOLDER = "[PROTECTED]"

_EMAIL_RE = re.compile(r"(.).*@")
_PHONE_RE = re.compile(r"(.{3}).*(.{4})$")


def mask_email(email: str) -> str:
    return _EMAIL_RE.sub(r"\1***@", email, count=1)


def mask_phone(phone: str | None) -> str | None:
    if not phone:
        return None
    return _PHONE_RE.sub(r"\1***\2", phone, count=1)


def mask_sensitive_data(value: str, visible_chars: int = 3) -> str:
    if len(value) <= visible_chars * 2:
        return value
    start = value[:visible_chars]
    end = value[-visible_chars:]
    masked = "*" * max(3, len(value) - visible_chars * 2)
    return f"{start}{masked}{end}"


def sanitize_ticket_data(ticket: TicketData) -> TicketData:
    user = ticket.user.model_copy(
        update={"email": mask_email(ticket.user.email), "phone": mask_phone(ticket.user.phone)}
    )
    purchase = ticket.purchase.model_copy(
        update={
            "invoice_file_url": PROTECTED_PLACEHOLDER if ticket.purchase.invoice_file_url else None
        }
    )
    return ticket.model_copy(update={"user": user, "purchase": purchase})
