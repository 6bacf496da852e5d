"""
Rent The Moment Backend — Product Service
========================================

What:  CRUD and listing for the rental catalog.

Rules:
    - the referenced category must exist (400 otherwise)
    - slug is derived from the name on create and on rename
    - fetching a single product counts as a view (atomic increment in SQL)

Listing profile:
    category              exact, category id
    size / condition      exact, case-insensitive enumeration
    name / color          case-insensitive substring
    isAvailable           exact boolean
    isFeatured            exact boolean
    minPrice / maxPrice   price range bounds
    search                name OR description OR brand substring
    sort                  createdAt (default, desc), price, name, rating, views
"""

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from rentmoment.exceptions import StorageFailure, ValidationFailure
from rentmoment.models.category import Category
from rentmoment.models.product import PRODUCT_CONDITIONS, PRODUCT_SIZES, Product
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.product import (
    ProductCreate,
    ProductListData,
    ProductResponse,
    ProductUpdate,
)
from rentmoment.services.base import EntityService
from rentmoment.services.category_service import slugify
from rentmoment.services.collection import (
    ListingFields,
    as_bool,
    as_uuid,
    at_least,
    at_most,
    exact,
    one_of,
    search,
)

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ListingFields(
    filters={
        "category": exact("category_id", as_uuid),
        "size": exact("size", one_of(PRODUCT_SIZES)),
        "condition": exact("condition", one_of(PRODUCT_CONDITIONS)),
        "name": search("name"),
        "color": search("color"),
        "isAvailable": exact("is_available", as_bool),
        "isFeatured": exact("is_featured", as_bool),
        "minPrice": at_least("price"),
        "maxPrice": at_most("price"),
        "search": search("name", "description", "brand"),
    },
    sortable={
        "createdAt": "created_at",
        "price": "price",
        "name": "name",
        "rating": "rating",
        "views": "views",
    },
)

# Columns that an explicit null in an update body must not clear
REQUIRED_COLUMNS = (
    "name",
    "description",
    "images",
    "price",
    "original_price",
    "size",
    "color",
    "condition",
    "rental_duration",
    "is_available",
    "is_featured",
    "tags",
    "specifications",
)


class ProductService(EntityService):
    model = Product
    resource = "product"
    fields = PRODUCT_FIELDS

    async def _category(self, db: AsyncSession, category_id: uuid.UUID) -> Category:
        """The referenced category, or a 400 (it is a body field, not the URL resource)."""
        try:
            result = await db.execute(select(Category).where(Category.id == category_id))
        except SQLAlchemyError as e:
            logger.error("Database error fetching category %s: %s", category_id, str(e))
            raise StorageFailure(context={"resource": "category", "error_type": type(e).__name__})
        category = result.scalar_one_or_none()
        if category is None:
            raise ValidationFailure(message="Category not found", field="category")
        return category

    async def list(self, db: AsyncSession, request: ListingRequest) -> ProductListData:
        result = await self._list(db, request)
        products = [ProductResponse.model_validate(p) for p in result.items]
        return ProductListData(**result.to_data("products", products))

    async def get(self, db: AsyncSession, product_id: uuid.UUID) -> ProductResponse:
        product = await self._get(db, product_id)
        # Atomic increment in SQL; updated_at stays untouched
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(views=Product.views + 1, updated_at=Product.updated_at)
            .returning(Product.views)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Database error counting view of %s: %s", product_id, str(e))
            raise StorageFailure(context={"resource": "product", "error_type": type(e).__name__})
        set_committed_value(product, "views", result.scalar_one())
        return ProductResponse.model_validate(product)

    async def create(self, db: AsyncSession, data: ProductCreate) -> ProductResponse:
        category = await self._category(db, data.category)
        fields = data.model_dump(exclude={"category"})
        product = Product(**fields, category=category, slug=slugify(data.name))
        db.add(product)
        await self._flush(db)
        logger.info("Product created: %s (%s)", product.id, product.slug)
        return ProductResponse.model_validate(product)

    async def update(
        self, db: AsyncSession, product_id: uuid.UUID, data: ProductUpdate
    ) -> ProductResponse:
        product = await self._get(db, product_id)
        changes = data.model_dump(exclude_unset=True)

        category_id = changes.pop("category", None)
        if category_id is not None:
            product.category = await self._category(db, category_id)

        self._apply(product, changes, required=REQUIRED_COLUMNS)
        if changes.get("name"):
            product.slug = slugify(product.name)

        await self._flush(db)
        return ProductResponse.model_validate(product)

    async def delete(self, db: AsyncSession, product_id: uuid.UUID) -> None:
        product = await self._get(db, product_id)
        await db.delete(product)
        await self._flush(db)
        logger.info("Product deleted: %s", product_id)


product_service = ProductService()
