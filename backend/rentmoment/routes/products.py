"""
Rent The Moment Backend — Product Routes
=======================================

What:  Public catalog browsing plus admin CRUD under /api/products.

Example:
    GET /api/products?category=<uuid>&size=M&minPrice=500&maxPrice=2000&sort=-rating
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.database import get_db_session
from rentmoment.models.user import User
from rentmoment.schemas.common import ApiResponse, ErrorResponse
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.product import ProductCreate, ProductData, ProductListData, ProductUpdate
from rentmoment.security import require_admin
from rentmoment.services.product_service import product_service

router = APIRouter(prefix="/api/products", tags=["Products"])

NOT_FOUND = {404: {"description": "Product not found", "model": ErrorResponse}}


@router.get("", response_model=ApiResponse[ProductListData], summary="List products")
async def list_products(
    response: Response,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    category: str | None = Query(default=None, description="Category id"),
    size: str | None = Query(default=None, description="XS, S, M, L, XL, XXL or Free Size"),
    condition: str | None = Query(default=None),
    name: str | None = Query(default=None, description="Substring of the product name"),
    color: str | None = Query(default=None),
    is_available: str | None = Query(default=None, alias="isAvailable"),
    is_featured: str | None = Query(default=None, alias="isFeatured"),
    min_price: str | None = Query(default=None, alias="minPrice"),
    max_price: str | None = Query(default=None, alias="maxPrice"),
    search: str | None = Query(default=None, description="Substring of name, description or brand"),
    sort: str | None = Query(default=None, description="e.g. -createdAt, price, -rating"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProductListData]:
    request = ListingRequest.from_query(
        page=page,
        limit=limit,
        sort=sort,
        category=category,
        size=size,
        condition=condition,
        name=name,
        color=color,
        isAvailable=is_available,
        isFeatured=is_featured,
        minPrice=min_price,
        maxPrice=max_price,
        search=search,
    )
    data = await product_service.list(db, request)
    response.headers["X-Total-Count"] = str(data.total)
    return ApiResponse(data=data)


@router.get(
    "/{product_id}",
    response_model=ApiResponse[ProductData],
    responses=NOT_FOUND,
    summary="Get a product (counts as a view)",
)
async def get_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProductData]:
    product = await product_service.get(db, product_id)
    return ApiResponse(data=ProductData(product=product))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[ProductData],
    responses={400: {"description": "Validation errors or unknown category", "model": ErrorResponse}},
    summary="Create a product",
)
async def create_product(
    body: ProductCreate,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[ProductData]:
    product = await product_service.create(db, body)
    return ApiResponse(message="Product created successfully", data=ProductData(product=product))


@router.put(
    "/{product_id}",
    response_model=ApiResponse[ProductData],
    responses=NOT_FOUND,
    summary="Update a product",
)
async def update_product(
    product_id: UUID,
    body: ProductUpdate,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[ProductData]:
    product = await product_service.update(db, product_id, body)
    return ApiResponse(message="Product updated successfully", data=ProductData(product=product))


@router.delete(
    "/{product_id}",
    response_model=ApiResponse[None],
    responses=NOT_FOUND,
    summary="Delete a product",
)
async def delete_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[None]:
    await product_service.delete(db, product_id)
    return ApiResponse(message="Product deleted successfully")
