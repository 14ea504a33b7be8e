import uuid
"""Order & PreOrder models with their status transition tables."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Numeric, Integer, Enum, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grocery.core.exceptions import InvalidTransitionError
from grocery.db.base import Base
from grocery.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    READY_FOR_PICKUP = "ready_for_pickup"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PreOrderStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    READY_FOR_PICKUP = "ready_for_pickup"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.READY_FOR_PICKUP, OrderStatus.CANCELLED}),
    OrderStatus.READY_FOR_PICKUP: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

PRE_ORDER_TRANSITIONS: dict[PreOrderStatus, frozenset[PreOrderStatus]] = {
    PreOrderStatus.PENDING: frozenset({PreOrderStatus.APPROVED, PreOrderStatus.CANCELLED}),
    PreOrderStatus.APPROVED: frozenset({PreOrderStatus.READY_FOR_PICKUP, PreOrderStatus.CANCELLED}),
    PreOrderStatus.READY_FOR_PICKUP: frozenset({PreOrderStatus.COMPLETED, PreOrderStatus.CANCELLED}),
    PreOrderStatus.COMPLETED: frozenset(),
    PreOrderStatus.CANCELLED: frozenset(),
}


def check_transition(table: dict, current: enum.Enum, requested: enum.Enum) -> None:
    """Raise InvalidTransitionError unless ``current -> requested`` is in ``table``."""
    if requested not in table[current]:
        raise InvalidTransitionError(current.value, requested.value)


def _status_enum(enum_cls, name: str) -> Enum:
    return Enum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])


class Order(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "orders"

    user_id: Mapped["uuid.UUID | None"] = mapped_column(UUID(as_uuid=True), index=True)
    status: Mapped[OrderStatus] = mapped_column(
        _status_enum(OrderStatus, "order_status"), default=OrderStatus.PENDING, nullable=False, index=True
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Order {self.id} status={self.status}>"


class OrderItem(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "order_items"

    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Foreign keys
    order_id: Mapped["uuid.UUID"] = mapped_column(
        UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped["uuid.UUID"] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False
    )

    # Relationships
    order = relationship("Order", back_populates="items")

    def __repr__(self) -> str:
        return f"<OrderItem product={self.product_id} qty={self.qty}>"


class PreOrder(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "pre_orders"

    user_id: Mapped["uuid.UUID | None"] = mapped_column(UUID(as_uuid=True), index=True)
    status: Mapped[PreOrderStatus] = mapped_column(
        _status_enum(PreOrderStatus, "pre_order_status"),
        default=PreOrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="USD", nullable=False)
    pickup_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Relationships
    items = relationship("PreOrderItem", back_populates="pre_order", cascade="all, delete-orphan", lazy="selectin")

    def __repr__(self) -> str:
        return f"<PreOrder {self.id} status={self.status}>"


class PreOrderItem(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "pre_order_items"

    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Foreign keys
    pre_order_id: Mapped["uuid.UUID"] = mapped_column(
        UUID(as_uuid=True), ForeignKey("pre_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped["uuid.UUID"] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False
    )

    # Relationships
    pre_order = relationship("PreOrder", back_populates="items")

    def __repr__(self) -> str:
        return f"<PreOrderItem product={self.product_id} qty={self.qty}>"
