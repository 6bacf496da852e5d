"""Category Schemas"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from rentmoment.schemas.common import CamelModel
from rentmoment.schemas.listing import PaginatedData


class CategoryCreate(CamelModel):
    name: str = Field(min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True
    sort_order: int = 0


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    description: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategorySummary(CamelModel):
    id: uuid.UUID
    name: str
    slug: str


class CategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    sort_order: int
    created_at: datetime
    updated_at: datetime


class CategoryData(CamelModel):
    category: CategoryResponse


class CategoryListData(PaginatedData):
    categories: List[CategoryResponse]
