from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warranty_tracker.models.base import Base, TimestampMixin


class Purchase(TimestampMixin, Base):
    __tablename__ = "purchases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), index=True)
    invoice_number: Mapped[str] = mapped_column(String(100))
    # Uploaded invoice PDF or image. Never returned by the public lookup.
    invoice_file_url: Mapped[str | None] = mapped_column(Text)
    purchase_date: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    user = relationship("User", back_populates="purchases")
    product = relationship("Product")
