from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warranty_tracker.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(150), unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(20))

    purchases = relationship("Purchase", back_populates="user")
    tickets = relationship("Ticket", back_populates="user")
