"""
Merchant SQLAlchemy Model
=========================

What:  A partner shop or tailor the platform sources garments from.
Who:   Managed only by admins via /api/merchants.

The original record had just name / mobile number / address; timestamps
were added so merchants list newest first like every other collection.
"""

import uuid
from typing import Optional

from sqlalchemy import Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from rentmoment.database import Base, TimestampMixin


class Merchant(TimestampMixin, Base):
    __tablename__ = "merchants"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Digits only; kept as text so leading zeros and country codes survive
    mobilenumber: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_merchants_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Merchant(id={self.id}, name='{self.name}')>"
