"""
Rent The Moment Backend — Merchant Routes
========================================

What:  Admin CRUD for merchant records under /api/merchants.
How:   Query strings are handed to ListingRequest.from_query untouched;
       normalization (page ≤ 0, limit out of range, junk sort) happens there.

Example:
    GET /api/merchants?page=2&limit=10&search=silk
    → {"success": true,
       "data": {"merchants": [...], "totalPages": 3, "currentPage": 2,
                "total": 25, "hasNextPage": true, "hasPrevPage": true}}
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.database import get_db_session
from rentmoment.models.user import User
from rentmoment.schemas.common import ApiResponse, ErrorResponse
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.merchant import (
    MerchantCreate,
    MerchantData,
    MerchantListData,
    MerchantUpdate,
)
from rentmoment.security import require_admin
from rentmoment.services.merchant_service import merchant_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/merchants", tags=["Merchants"])

ADMIN_ERRORS = {
    401: {"description": "Not logged in", "model": ErrorResponse},
    403: {"description": "Not an admin", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ApiResponse[MerchantListData],
    responses={**ADMIN_ERRORS, 504: {"description": "Listing timed out", "model": ErrorResponse}},
    summary="List merchants",
)
async def list_merchants(
    response: Response,
    page: str | None = Query(default=None, description="1-indexed page number"),
    limit: str | None = Query(default=None, description="Page size (max 100)"),
    name: str | None = Query(default=None, description="Substring of the merchant name"),
    search: str | None = Query(default=None, description="Substring of name or address"),
    sort: str | None = Query(default=None, description="e.g. -createdAt or name"),
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[MerchantListData]:
    request = ListingRequest.from_query(
        page=page, limit=limit, sort=sort, name=name, search=search
    )
    data = await merchant_service.list(db, request)
    response.headers["X-Total-Count"] = str(data.total)
    return ApiResponse(data=data)


@router.get(
    "/{merchant_id}",
    response_model=ApiResponse[MerchantData],
    responses={**ADMIN_ERRORS, 404: {"description": "Merchant not found", "model": ErrorResponse}},
    summary="Get a merchant",
)
async def get_merchant(
    merchant_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[MerchantData]:
    merchant = await merchant_service.get(db, merchant_id)
    return ApiResponse(data=MerchantData(merchant=merchant))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[MerchantData],
    responses={**ADMIN_ERRORS, 400: {"description": "Validation errors", "model": ErrorResponse}},
    summary="Create a merchant",
)
async def create_merchant(
    body: MerchantCreate,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[MerchantData]:
    merchant = await merchant_service.create(db, body)
    return ApiResponse(message="Merchant created successfully", data=MerchantData(merchant=merchant))


@router.put(
    "/{merchant_id}",
    response_model=ApiResponse[MerchantData],
    responses={**ADMIN_ERRORS, 404: {"description": "Merchant not found", "model": ErrorResponse}},
    summary="Update a merchant",
)
async def update_merchant(
    merchant_id: UUID,
    body: MerchantUpdate,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[MerchantData]:
    merchant = await merchant_service.update(db, merchant_id, body)
    return ApiResponse(message="Merchant updated successfully", data=MerchantData(merchant=merchant))


@router.delete(
    "/{merchant_id}",
    response_model=ApiResponse[None],
    responses={**ADMIN_ERRORS, 404: {"description": "Merchant not found", "model": ErrorResponse}},
    summary="Delete a merchant",
)
async def delete_merchant(
    merchant_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[None]:
    await merchant_service.delete(db, merchant_id)
    return ApiResponse(message="Merchant deleted successfully")
