"""
User SQLAlchemy Model
=====================

What:  A customer or admin account.
Why:   Orders belong to users; the admin role gates catalog management.

Security:
    Only the bcrypt hash is stored (see rentmoment.security). The hash is
    never part of any response schema.
"""

import uuid
from typing import Optional

from sqlalchemy import Boolean, Index, String, Text, Uuid, text, true
from sqlalchemy.orm import Mapped, mapped_column

from rentmoment.database import Base, TimestampMixin

USER_ROLES = ("user", "admin")


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    # Stored lower-cased; uniqueness is enforced by the database
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="user", server_default=text("'user'")
    )
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )

    __table_args__ = (
        Index("idx_users_created_at", "created_at"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
