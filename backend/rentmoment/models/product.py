"""
Product SQLAlchemy Model
========================

What:  A rentable garment in the catalog.
How:   `images`, `tags` and `specifications` are JSON columns; they are always
       replaced wholesale by the service layer, never mutated in place.

Query Patterns:
    - Storefront listing: WHERE is_available AND category_id = ? ORDER BY created_at DESC
    - Search: ILIKE on name / description / brand
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    false,
    text,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentmoment.database import Base, TimestampMixin
from rentmoment.models.category import Category

PRODUCT_SIZES = ("XS", "S", "M", "L", "XL", "XXL", "Free Size")
PRODUCT_CONDITIONS = ("Excellent", "Very Good", "Good", "Fair")


class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False
    )
    # selectin: loaded with the product so responses can embed the category
    category: Mapped[Category] = relationship(lazy="selectin")

    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Rental price vs. retail price of the garment
    price: Mapped[float] = mapped_column(Float, nullable=False)
    original_price: Mapped[float] = mapped_column(Float, nullable=False)

    size: Mapped[str] = mapped_column(String(20), nullable=False)
    color: Mapped[str] = mapped_column(String(50), nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    material: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    condition: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Good", server_default=text("'Good'")
    )

    # Days
    rental_duration: Mapped[int] = mapped_column(Integer, nullable=False)

    is_available: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    is_featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    specifications: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    care_instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    slug: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default=text("0"))
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default=text("0"))
    num_reviews: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    __table_args__ = (
        Index("idx_products_created_at", "created_at"),
        Index("idx_products_category", "category_id"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', size='{self.size}')>"
