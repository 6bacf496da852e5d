"""
Rent The Moment Backend — Category Service
=========================================

What:  CRUD and listing for catalog categories.

Rules:
    - slug is derived from the name on create and on rename
    - names are unique (409 on duplicates)
    - a category cannot be deleted while products still reference it (409)

Listing profile:
    isActive    exact boolean
    search      name OR description, case-insensitive substring
    sort        sortOrder, name, createdAt (default, desc)
"""

import logging
import re
import unicodedata
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.exceptions import ConflictError
from rentmoment.models.category import Category
from rentmoment.models.product import Product
from rentmoment.schemas.category import (
    CategoryCreate,
    CategoryListData,
    CategoryResponse,
    CategoryUpdate,
)
from rentmoment.schemas.listing import ListingRequest
from rentmoment.services.base import EntityService
from rentmoment.services.collection import ListingFields, as_bool, exact, search

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ListingFields(
    filters={
        "isActive": exact("is_active", as_bool),
        "search": search("name", "description"),
    },
    sortable={
        "sortOrder": "sort_order",
        "name": "name",
        "createdAt": "created_at",
    },
)


def slugify(value: str) -> str:
    """
    "Bridal Lehenga (Red)" → "bridal-lehenga-red"

    Accents are folded to ASCII; anything that is not a letter or digit
    becomes a single hyphen.
    """
    text = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return text or "item"


class CategoryService(EntityService):
    model = Category
    resource = "category"
    fields = CATEGORY_FIELDS

    async def list(self, db: AsyncSession, request: ListingRequest) -> CategoryListData:
        result = await self._list(db, request)
        categories = [CategoryResponse.model_validate(c) for c in result.items]
        return CategoryListData(**result.to_data("categories", categories))

    async def get(self, db: AsyncSession, category_id: uuid.UUID) -> CategoryResponse:
        return CategoryResponse.model_validate(await self._get(db, category_id))

    async def create(self, db: AsyncSession, data: CategoryCreate) -> CategoryResponse:
        category = Category(**data.model_dump(), slug=slugify(data.name))
        db.add(category)
        await self._flush(db, conflict_message="Category already exists")
        logger.info("Category created: %s (%s)", category.id, category.slug)
        return CategoryResponse.model_validate(category)

    async def update(
        self, db: AsyncSession, category_id: uuid.UUID, data: CategoryUpdate
    ) -> CategoryResponse:
        category = await self._get(db, category_id)
        changes = data.model_dump(exclude_unset=True)
        self._apply(category, changes, required=("name", "is_active", "sort_order"))
        if changes.get("name"):
            category.slug = slugify(category.name)
        await self._flush(db, conflict_message="Category already exists")
        return CategoryResponse.model_validate(category)

    async def delete(self, db: AsyncSession, category_id: uuid.UUID) -> None:
        category = await self._get(db, category_id)

        in_use = await db.execute(
            select(func.count()).select_from(Product).where(Product.category_id == category_id)
        )
        product_count = int(in_use.scalar() or 0)
        if product_count:
            raise ConflictError(
                message="Cannot delete category with existing products",
                context={"category_id": str(category_id), "products": product_count},
            )

        await db.delete(category)
        await self._flush(db)
        logger.info("Category deleted: %s", category_id)


category_service = CategoryService()
