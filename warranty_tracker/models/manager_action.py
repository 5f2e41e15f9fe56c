from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warranty_tracker.models.base import Base


class ManagerAction(Base):
    __tablename__ = "manager_actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(ForeignKey("tickets.id"), index=True)
    approved: Mapped[bool | None] = mapped_column(Boolean, default=False)
    remarks: Mapped[str | None] = mapped_column(Text)
    action_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    ticket = relationship("Ticket", back_populates="manager_action")
