"""
Category SQLAlchemy Model
=========================

What:  A catalog section (e.g. "Lehengas", "Sarees") products are filed under.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text, Uuid, text, true
from sqlalchemy.orm import Mapped, mapped_column

from rentmoment.database import Base, TimestampMixin


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    # Manual ordering for the storefront menu
    sort_order: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"
