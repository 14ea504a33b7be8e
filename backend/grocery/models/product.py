import uuid
"""Product model."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, Numeric, Integer, Boolean, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grocery.core.config import settings
from grocery.db.base import Base
from grocery.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class StockStatus(str, enum.Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def stock_status_for(stock: int, threshold: int | None = None) -> StockStatus:
    """Display band for a stock count: 0, 1..threshold, or above."""
    if threshold is None:
        threshold = settings.LOW_STOCK_THRESHOLD
    if stock <= 0:
        return StockStatus.OUT_OF_STOCK
    if stock <= threshold:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class Product(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("cost >= 0", name="ck_products_cost_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Soft delete: deleted rows keep their sales and inventory history
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Foreign keys
    type_id: Mapped["uuid.UUID | None"] = mapped_column(
        UUID(as_uuid=True), ForeignKey("product_types.id", ondelete="SET NULL")
    )

    # Relationships
    product_type = relationship("ProductType", back_populates="products", lazy="selectin")
    transactions = relationship("InventoryTransaction", back_populates="product")
    sales = relationship("Sale", back_populates="product")

    @property
    def stock_status(self) -> StockStatus:
        return stock_status_for(self.stock)

    def __repr__(self) -> str:
        return f"<Product {self.name} stock={self.stock}>"
