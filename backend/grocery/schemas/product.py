"""Product and product type schemas for API request/response."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, ConfigDict

from grocery.models.product import StockStatus


# ── Product type ──
class ProductTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class ProductTypeListResponse(BaseModel):
    product_types: list[ProductTypeResponse]


# ── Product ──
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    type: str = Field(..., min_length=1, max_length=100, description="Category name; created if missing")
    description: str | None = Field(None, max_length=500)
    cost: Decimal = Field(..., ge=0, decimal_places=2)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    stock: int = Field(..., ge=0)


class ProductUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    type_id: UUID | None = None
    cost: Decimal = Field(..., ge=0, decimal_places=2)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    stock: int = Field(..., ge=0)


class ProductResponse(BaseModel):
    """Product with its category normalised to one object or null."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    name: str
    description: str | None = None
    type_id: UUID | None = None
    category: ProductTypeResponse | None = Field(
        None, validation_alias=AliasChoices("category", "product_type")
    )
    cost: Decimal
    price: Decimal
    stock: int
    stock_status: StockStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ProductEnvelope(BaseModel):
    message: str | None = None
    product: ProductResponse


class SaleableProduct(BaseModel):
    """Row of the product picker on the sale screen."""
    id: UUID
    name: str
    price: Decimal
    stock: int
    type: str
    type_id: UUID | None = None


class SaleableProductListResponse(BaseModel):
    products: list[SaleableProduct]
