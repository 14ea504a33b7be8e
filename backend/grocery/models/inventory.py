import uuid
"""Inventory transaction model: append-only audit trail of stock deltas."""

import enum
from datetime import datetime

from sqlalchemy import String, Text, Integer, Enum, DateTime, ForeignKey, Index, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grocery.db.base import Base
from grocery.models.mixins import UUIDPrimaryKeyMixin


class TransactionType(str, enum.Enum):
    RESTOCK = "restock"
    ADJUSTMENT = "adjustment"
    SALE = "sale"
    PRE_ORDER_DEDUCTION = "pre_order_deduction"


class InventoryTransaction(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "inventory_transactions"
    __table_args__ = (
        Index("ix_inventory_transactions_product_created", "product_id", "created_at"),
    )

    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name="transaction_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    quantity_change: Mapped[int] = mapped_column(Integer, nullable=False)  # signed
    reference_id: Mapped[str | None] = mapped_column(String(100))
    reference_type: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Foreign keys
    product_id: Mapped["uuid.UUID"] = mapped_column(
        UUID(as_uuid=True), ForeignKey("products.id"), nullable=False
    )

    # Relationships
    product = relationship("Product", back_populates="transactions")

    def __repr__(self) -> str:
        return f"<InventoryTransaction {self.transaction_type.value} product={self.product_id} change={self.quantity_change}>"
