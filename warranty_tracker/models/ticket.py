from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warranty_tracker.models.base import Base, TimestampMixin


class Ticket(TimestampMixin, Base):
    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    purchase_id: Mapped[int] = mapped_column(ForeignKey("purchases.id"), index=True)
    issue_type: Mapped[str] = mapped_column(String(50))
    description: Mapped[str | None] = mapped_column(Text)
    # pending, validated, manager_review, approved, rejected, scheduled
    status: Mapped[str | None] = mapped_column(String(30), default="pending", index=True)
    tracking_code: Mapped[uuid.UUID] = mapped_column(
        Uuid, default=uuid.uuid4, unique=True, index=True
    )

    user = relationship("User", back_populates="tickets")
    purchase = relationship("Purchase")
    manager_action = relationship("ManagerAction", back_populates="ticket", uselist=False)
    appointment = relationship("ServiceAppointment", back_populates="ticket", uselist=False)
