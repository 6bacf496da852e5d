"""
Order Schemas
=============

Checkout sends product ids, quantities and a rental window per line; the
price and product name are looked up server-side and snapshotted.
"""

import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import Field, model_validator

from rentmoment.schemas.common import CamelModel
from rentmoment.schemas.listing import PaginatedData

OrderStatus = Literal["pending", "confirmed", "shipped", "delivered", "returned", "cancelled"]
PaymentStatus = Literal["pending", "paid", "refunded"]


class OrderItemCreate(CamelModel):
    product: uuid.UUID = Field(description="Product id")
    quantity: int = Field(default=1, ge=1, le=20)
    rental_start_date: date
    rental_end_date: date

    @model_validator(mode="after")
    def check_rental_window(self) -> "OrderItemCreate":
        if self.rental_end_date < self.rental_start_date:
            raise ValueError("Rental end date must be on or after the start date")
        return self


class OrderCreate(CamelModel):
    items: List[OrderItemCreate] = Field(min_length=1)
    shipping_address: str = Field(min_length=5, max_length=500)
    phone: str = Field(min_length=7, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=1000)


class OrderStatusUpdate(CamelModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None

    @model_validator(mode="after")
    def require_change(self) -> "OrderStatusUpdate":
        if self.status is None and self.payment_status is None:
            raise ValueError("Provide status or paymentStatus")
        return self


class OrderItemResponse(CamelModel):
    product: uuid.UUID
    name: str
    price: float
    quantity: int
    rental_start_date: date
    rental_end_date: date


class OrderResponse(CamelModel):
    id: uuid.UUID
    user: uuid.UUID = Field(validation_alias="user_id")
    items: List[OrderItemResponse]
    total_amount: float
    status: str
    payment_status: str
    shipping_address: str
    phone: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderData(CamelModel):
    order: OrderResponse


class OrderListData(PaginatedData):
    orders: List[OrderResponse]
