"""
Rent The Moment Backend — Category Routes
========================================

What:  Public category browsing plus admin CRUD under /api/categories.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.database import get_db_session
from rentmoment.models.user import User
from rentmoment.schemas.category import (
    CategoryCreate,
    CategoryData,
    CategoryListData,
    CategoryUpdate,
)
from rentmoment.schemas.common import ApiResponse, ErrorResponse
from rentmoment.schemas.listing import ListingRequest
from rentmoment.security import require_admin
from rentmoment.services.category_service import category_service

router = APIRouter(prefix="/api/categories", tags=["Categories"])

NOT_FOUND = {404: {"description": "Category not found", "model": ErrorResponse}}


@router.get("", response_model=ApiResponse[CategoryListData], summary="List categories")
async def list_categories(
    response: Response,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    is_active: str | None = Query(default=None, alias="isActive"),
    search: str | None = Query(default=None, description="Substring of name or description"),
    sort: str | None = Query(default=None, description="e.g. sortOrder or -createdAt"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryListData]:
    request = ListingRequest.from_query(
        page=page, limit=limit, sort=sort, isActive=is_active, search=search
    )
    data = await category_service.list(db, request)
    response.headers["X-Total-Count"] = str(data.total)
    return ApiResponse(data=data)


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryData],
    responses=NOT_FOUND,
    summary="Get a category",
)
async def get_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryData]:
    category = await category_service.get(db, category_id)
    return ApiResponse(data=CategoryData(category=category))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[CategoryData],
    responses={409: {"description": "Category already exists", "model": ErrorResponse}},
    summary="Create a category",
)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[CategoryData]:
    category = await category_service.create(db, body)
    return ApiResponse(message="Category created successfully", data=CategoryData(category=category))


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryData],
    responses=NOT_FOUND,
    summary="Update a category",
)
async def update_category(
    category_id: UUID,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[CategoryData]:
    category = await category_service.update(db, category_id, body)
    return ApiResponse(message="Category updated successfully", data=CategoryData(category=category))


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[None],
    responses={
        **NOT_FOUND,
        409: {"description": "Category still has products", "model": ErrorResponse},
    },
    summary="Delete a category",
)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[None]:
    await category_service.delete(db, category_id)
    return ApiResponse(message="Category deleted successfully")
