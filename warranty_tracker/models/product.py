from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from warranty_tracker.models.base import Base, TimestampMixin


class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(150))
    brand: Mapped[str | None] = mapped_column(String(100))
    model: Mapped[str | None] = mapped_column(String(100))
    warranty_months: Mapped[int | None] = mapped_column(Integer, default=12)
