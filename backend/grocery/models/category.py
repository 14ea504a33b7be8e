"""Product type (category) model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from grocery.db.base import Base
from grocery.models.mixins import UUIDPrimaryKeyMixin, TimestampMixin


class ProductType(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "product_types"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    # Relationships
    products = relationship("Product", back_populates="product_type")

    def __repr__(self) -> str:
        return f"<ProductType {self.name}>"
