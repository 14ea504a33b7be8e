import uuid
"""Sale model: one walk-in sale line."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Numeric, Integer, Enum, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grocery.db.base import Base
from grocery.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    MOBILE = "mobile"
    OTHER = "other"


class Sale(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "sales"
    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_sales_qty_positive"),
        CheckConstraint("unit_price >= 0", name="ck_sales_unit_price_non_negative"),
    )

    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    sale_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    # Foreign keys
    product_id: Mapped["uuid.UUID"] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False, index=True
    )

    # Relationships
    product = relationship("Product", back_populates="sales", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Sale product={self.product_id} qty={self.qty} subtotal={self.subtotal}>"
