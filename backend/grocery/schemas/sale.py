"""Sale schemas for API request/response."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

from grocery.models.sale import PaymentMethod
from grocery.schemas.product import ProductTypeResponse


class SaleItemCreate(BaseModel):
    product_id: UUID
    qty: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, decimal_places=2)


class BulkSaleCreate(BaseModel):
    sales: list[SaleItemCreate] = Field(..., min_length=1)
    payment_method: PaymentMethod


class SaleCreate(SaleItemCreate):
    payment_method: PaymentMethod


class SaleRecord(BaseModel):
    """A created sale row, annotated with the product name."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    qty: int
    unit_price: Decimal
    subtotal: Decimal
    payment_method: PaymentMethod
    sale_date: datetime | None = None
    product_name: str | None = None


class BulkSaleResponse(BaseModel):
    sales: list[SaleRecord]
    message: str


class SingleSaleResponse(BaseModel):
    sale: SaleRecord


class SaleProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    price: Decimal
    stock: int
    category: ProductTypeResponse | None = Field(
        None, validation_alias=AliasChoices("category", "product_type")
    )


class SaleResponse(BaseModel):
    """Sales history row with its product and category."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    product_id: UUID
    qty: int
    unit_price: Decimal
    subtotal: Decimal
    payment_method: PaymentMethod
    sale_date: datetime
    product: SaleProduct | None = None


class SaleListResponse(BaseModel):
    sales: list[SaleResponse]


class TopProduct(BaseModel):
    name: str
    quantity: int


class TodayStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_sales: Decimal = Decimal("0")
    total_items: int = 0
    total_transactions: int = 0
    top_products: list[TopProduct] = Field(default_factory=list)
