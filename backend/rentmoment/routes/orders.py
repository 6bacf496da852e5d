"""
Rent The Moment Backend — Order Routes
=====================================

What:  Checkout, "my orders", and the admin order desk under /api/orders.

Gates:
    POST /orders               logged in
    GET  /orders/my            logged in (own orders only)
    GET  /orders               admin
    GET  /orders/{id}          owner or admin
    PUT  /orders/{id}/status   admin
    PUT  /orders/{id}/cancel   owner, while pending
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.database import get_db_session
from rentmoment.models.user import User
from rentmoment.schemas.common import ApiResponse, ErrorResponse
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.order import OrderCreate, OrderData, OrderListData, OrderStatusUpdate
from rentmoment.security import get_current_user, require_admin
from rentmoment.services.order_service import order_service

router = APIRouter(prefix="/api/orders", tags=["Orders"])

NOT_FOUND = {404: {"description": "Order not found", "model": ErrorResponse}}


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[OrderData],
    responses={
        400: {"description": "Validation errors or product unavailable", "model": ErrorResponse},
        404: {"description": "Product not found", "model": ErrorResponse},
    },
    summary="Place an order",
)
async def create_order(
    body: OrderCreate,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[OrderData]:
    order = await order_service.create(db, user, body)
    return ApiResponse(message="Order placed successfully", data=OrderData(order=order))


@router.get("/my", response_model=ApiResponse[OrderListData], summary="List my orders")
async def list_my_orders(
    response: Response,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    order_status: str | None = Query(default=None, alias="status"),
    sort: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[OrderListData]:
    request = ListingRequest.from_query(page=page, limit=limit, sort=sort, status=order_status)
    data = await order_service.list_for_user(db, user.id, request)
    response.headers["X-Total-Count"] = str(data.total)
    return ApiResponse(data=data)


@router.get("", response_model=ApiResponse[OrderListData], summary="List all orders")
async def list_orders(
    response: Response,
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    order_status: str | None = Query(default=None, alias="status"),
    payment_status: str | None = Query(default=None, alias="paymentStatus"),
    user_id: str | None = Query(default=None, alias="user", description="User id"),
    sort: str | None = Query(default=None, description="e.g. -createdAt or -totalAmount"),
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[OrderListData]:
    request = ListingRequest.from_query(
        page=page,
        limit=limit,
        sort=sort,
        status=order_status,
        paymentStatus=payment_status,
        user=user_id,
    )
    data = await order_service.list(db, request)
    response.headers["X-Total-Count"] = str(data.total)
    return ApiResponse(data=data)


@router.get(
    "/{order_id}",
    response_model=ApiResponse[OrderData],
    responses={**NOT_FOUND, 403: {"description": "Not your order", "model": ErrorResponse}},
    summary="Get an order",
)
async def get_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[OrderData]:
    order = await order_service.get(db, order_id, user)
    return ApiResponse(data=OrderData(order=order))


@router.put(
    "/{order_id}/status",
    response_model=ApiResponse[OrderData],
    responses=NOT_FOUND,
    summary="Update order / payment status",
)
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db_session),
    _admin: User = Depends(require_admin),
) -> ApiResponse[OrderData]:
    order = await order_service.update_status(db, order_id, body)
    return ApiResponse(message="Order status updated", data=OrderData(order=order))


@router.put(
    "/{order_id}/cancel",
    response_model=ApiResponse[OrderData],
    responses={
        **NOT_FOUND,
        400: {"description": "Order is no longer pending", "model": ErrorResponse},
        403: {"description": "Not your order", "model": ErrorResponse},
    },
    summary="Cancel my order",
)
async def cancel_order(
    order_id: UUID,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
) -> ApiResponse[OrderData]:
    order = await order_service.cancel(db, order_id, user)
    return ApiResponse(message="Order cancelled", data=OrderData(order=order))
