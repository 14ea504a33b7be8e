"""Order and pre-order schemas for API request/response."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from grocery.models.order import OrderStatus, PreOrderStatus


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    qty: int
    unit_price: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None
    status: OrderStatus
    total_amount: Decimal
    currency: str
    paid_at: datetime | None = None
    items: list[OrderItemResponse] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    size: int


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class PreOrderItemResponse(OrderItemResponse):
    subtotal: Decimal


class PreOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID | None
    status: PreOrderStatus
    total_amount: Decimal
    currency: str
    pickup_time: datetime | None = None
    paid_at: datetime | None = None
    items: list[PreOrderItemResponse] = []
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PreOrderListResponse(BaseModel):
    items: list[PreOrderResponse]
    total: int
    page: int
    size: int


class PreOrderStatusUpdate(BaseModel):
    status: PreOrderStatus
    pickup_time: datetime | None = None
