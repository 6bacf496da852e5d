"""
Order SQLAlchemy Model
======================

What:  A customer's rental order.
How:   Line items are stored as a JSON snapshot (product id, name, unit price,
       quantity, rental window) taken at checkout, so later catalog edits do
       not rewrite past orders.

Status flow:
    pending → confirmed → shipped → delivered → returned
    pending → cancelled (by the customer or an admin)
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Float, ForeignKey, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from rentmoment.database import Base, TimestampMixin

ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "returned", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "refunded")


class Order(TimestampMixin, Base):
    __tablename__ = "orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    total_amount: Mapped[float] = mapped_column(Float, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", server_default=text("'pending'")
    )
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", server_default=text("'pending'")
    )

    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_orders_created_at", "created_at"),
        Index("idx_orders_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status='{self.status}', total={self.total_amount})>"
