"""Inventory schemas for request/response."""

from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from grocery.schemas.product import ProductResponse


class StockAdjustmentRequest(BaseModel):
    """Signed stock delta for one product."""
    product_id: UUID
    quantity_change: int = Field(..., description="Change in stock (positive=in, negative=out)")
    transaction_type: Literal["restock", "adjustment"]
    notes: str | None = Field(None, max_length=500)

    @field_validator("quantity_change")
    @classmethod
    def _non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("quantity_change must be a non-zero integer")
        return v


class StockAdjustmentResponse(BaseModel):
    message: str = "Stock updated successfully"
    new_stock: int


class BulkStockAdjustmentRequest(BaseModel):
    adjustments: list[StockAdjustmentRequest] = Field(..., min_length=1)


class AdjustmentResult(BaseModel):
    product_id: UUID
    new_stock: int


class AdjustmentError(BaseModel):
    product_id: UUID
    error: str


class BulkStockAdjustmentResponse(BaseModel):
    """Partial-success report: callers must inspect ``errors``."""
    message: str
    results: list[AdjustmentResult]
    errors: list[AdjustmentError]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class InventoryListResponse(BaseModel):
    """Paginated list of products with stock status."""
    items: list[ProductResponse]
    pagination: Pagination


class InventoryStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_products: int = 0
    total_stock_value: Decimal = Decimal("0.00")
    low_stock_products: int = 0
    out_of_stock_products: int = 0
