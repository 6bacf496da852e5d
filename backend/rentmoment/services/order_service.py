"""
Rent The Moment Backend — Order Service
======================================

What:  Checkout, order history and the admin status workflow.

Checkout (create):
    1. Load every referenced product in one query
    2. Missing product → 404, unavailable product → 400
    3. Snapshot name + current price into each line item
    4. total_amount = Σ price × quantity

Access rules:
    get      owner or admin
    cancel   owner only, and only while the order is still pending
    status   admin (routes enforce the gate)

Listing profile:
    status / paymentStatus   exact, case-insensitive enumeration
    user                     exact, user id (required on /orders/my)
    sort                     createdAt (default, desc), totalAmount
"""

import logging
import uuid
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentmoment.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    StorageFailure,
    ValidationFailure,
)
from rentmoment.models.order import ORDER_STATUSES, PAYMENT_STATUSES, Order
from rentmoment.models.product import Product
from rentmoment.models.user import User
from rentmoment.schemas.listing import ListingRequest
from rentmoment.schemas.order import (
    OrderCreate,
    OrderListData,
    OrderResponse,
    OrderStatusUpdate,
)
from rentmoment.services.base import EntityService
from rentmoment.services.collection import ListingFields, as_uuid, exact, one_of

logger = logging.getLogger(__name__)

ORDER_FIELDS = ListingFields(
    filters={
        "status": exact("status", one_of(ORDER_STATUSES)),
        "paymentStatus": exact("payment_status", one_of(PAYMENT_STATUSES)),
        "user": exact("user_id", as_uuid),
    },
    sortable={
        "createdAt": "created_at",
        "totalAmount": "total_amount",
    },
)

# A customer's own history: the user filter is set server-side and must hold
MY_ORDER_FIELDS = ListingFields(
    filters={**ORDER_FIELDS.filters, "user": exact("user_id", as_uuid, required=True)},
    sortable=ORDER_FIELDS.sortable,
)


class OrderService(EntityService):
    model = Order
    resource = "order"
    fields = ORDER_FIELDS

    def _page(self, result) -> OrderListData:
        orders = [OrderResponse.model_validate(o) for o in result.items]
        return OrderListData(**result.to_data("orders", orders))

    async def list(self, db: AsyncSession, request: ListingRequest) -> OrderListData:
        return self._page(await self._list(db, request))

    async def list_for_user(
        self, db: AsyncSession, user_id: uuid.UUID, request: ListingRequest
    ) -> OrderListData:
        scoped = request.model_copy(update={"filters": {**request.filters, "user": user_id}})
        return self._page(await self._list(db, scoped, fields=MY_ORDER_FIELDS))

    async def get(self, db: AsyncSession, order_id: uuid.UUID, user: User) -> OrderResponse:
        order = await self._get(db, order_id)
        if order.user_id != user.id and not user.is_admin:
            raise PermissionDeniedError("Not authorized to view this order")
        return OrderResponse.model_validate(order)

    async def _products(self, db: AsyncSession, ids: List[uuid.UUID]) -> Dict[uuid.UUID, Product]:
        try:
            result = await db.execute(select(Product).where(Product.id.in_(ids)))
        except SQLAlchemyError as e:
            logger.error("Database error loading order products: %s", str(e))
            raise StorageFailure(context={"resource": "product", "error_type": type(e).__name__})
        return {product.id: product for product in result.scalars().all()}

    async def create(self, db: AsyncSession, user: User, data: OrderCreate) -> OrderResponse:
        products = await self._products(db, list({item.product for item in data.items}))

        items = []
        total = 0.0
        for item in data.items:
            product = products.get(item.product)
            if product is None:
                raise NotFoundError(resource="product", resource_id=str(item.product))
            if not product.is_available:
                raise ValidationFailure(
                    message=f"Product '{product.name}' is not available for rent",
                    field="items",
                )
            items.append(
                {
                    "product": str(product.id),
                    "name": product.name,
                    "price": product.price,
                    "quantity": item.quantity,
                    "rental_start_date": item.rental_start_date.isoformat(),
                    "rental_end_date": item.rental_end_date.isoformat(),
                }
            )
            total += product.price * item.quantity

        order = Order(
            user_id=user.id,
            items=items,
            total_amount=round(total, 2),
            shipping_address=data.shipping_address,
            phone=data.phone,
            notes=data.notes,
        )
        db.add(order)
        await self._flush(db)
        logger.info("Order %s placed by %s: %d items, total %.2f", order.id, user.id, len(items), total)
        return OrderResponse.model_validate(order)

    async def update_status(
        self, db: AsyncSession, order_id: uuid.UUID, data: OrderStatusUpdate
    ) -> OrderResponse:
        order = await self._get(db, order_id)
        if data.status is not None:
            order.status = data.status
        if data.payment_status is not None:
            order.payment_status = data.payment_status
        await self._flush(db)
        logger.info("Order %s → status=%s payment=%s", order.id, order.status, order.payment_status)
        return OrderResponse.model_validate(order)

    async def cancel(self, db: AsyncSession, order_id: uuid.UUID, user: User) -> OrderResponse:
        order = await self._get(db, order_id)
        if order.user_id != user.id:
            raise PermissionDeniedError("Not authorized to cancel this order")
        if order.status != "pending":
            raise ValidationFailure(
                message=f"Order cannot be cancelled once it is {order.status}",
                field="status",
            )
        order.status = "cancelled"
        await self._flush(db)
        logger.info("Order %s cancelled by owner", order.id)
        return OrderResponse.model_validate(order)


order_service = OrderService()
