"""
Product Schemas
===============

Validation mirrors the catalog rules:
    - at least one image URL
    - price and original price are non-negative
    - size and condition come from fixed vocabularies
    - rental duration is at least one day
"""

import uuid
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import Field

from rentmoment.schemas.category import CategorySummary
from rentmoment.schemas.common import CamelModel
from rentmoment.schemas.listing import PaginatedData

Size = Literal["XS", "S", "M", "L", "XL", "XXL", "Free Size"]
Condition = Literal["Excellent", "Very Good", "Good", "Fair"]


class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    category: uuid.UUID = Field(description="Category id")
    images: List[str] = Field(min_length=1)
    price: float = Field(ge=0, description="Rental price")
    original_price: float = Field(ge=0)
    size: Size
    color: str = Field(min_length=1, max_length=50)
    brand: Optional[str] = Field(default=None, max_length=100)
    material: Optional[str] = Field(default=None, max_length=100)
    condition: Condition = "Good"
    rental_duration: int = Field(ge=1, description="Rental duration in days")
    is_available: bool = True
    is_featured: bool = False
    tags: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)
    care_instructions: Optional[str] = None


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[uuid.UUID] = None
    images: Optional[List[str]] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    original_price: Optional[float] = Field(default=None, ge=0)
    size: Optional[Size] = None
    color: Optional[str] = Field(default=None, min_length=1, max_length=50)
    brand: Optional[str] = Field(default=None, max_length=100)
    material: Optional[str] = Field(default=None, max_length=100)
    condition: Optional[Condition] = None
    rental_duration: Optional[int] = Field(default=None, ge=1)
    is_available: Optional[bool] = None
    is_featured: Optional[bool] = None
    tags: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    care_instructions: Optional[str] = None


class ProductResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    category: Optional[CategorySummary] = None
    images: List[str]
    price: float
    original_price: float
    size: str
    color: str
    brand: Optional[str] = None
    material: Optional[str] = None
    condition: str
    rental_duration: int
    is_available: bool
    is_featured: bool
    tags: List[str]
    specifications: Dict[str, str]
    care_instructions: Optional[str] = None
    slug: str
    views: int
    rating: float
    num_reviews: int
    created_at: datetime
    updated_at: datetime


class ProductData(CamelModel):
    product: ProductResponse


class ProductListData(PaginatedData):
    products: List[ProductResponse]
