from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warranty_tracker.models.base import Base, TimestampMixin


class ServiceAppointment(TimestampMixin, Base):
    __tablename__ = "service_appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    ticket_id: Mapped[int] = mapped_column(ForeignKey("tickets.id"), index=True)
    service_center: Mapped[str | None] = mapped_column(String(150))
    appointment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    ticket = relationship("Ticket", back_populates="appointment")
