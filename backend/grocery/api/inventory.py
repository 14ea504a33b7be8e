"""Inventory management endpoints (admin only)."""

import math
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from grocery.core.config import settings
from grocery.core.deps import require_admin
from grocery.db.base import get_db
from grocery.models.product import Product, StockStatus
from grocery.schemas.auth import CurrentUser
from grocery.schemas.inventory import (
    StockAdjustmentRequest,
    StockAdjustmentResponse,
    BulkStockAdjustmentRequest,
    BulkStockAdjustmentResponse,
    InventoryListResponse,
    InventoryStats,
    Pagination,
)
from grocery.schemas.product import ProductResponse
from grocery.services.stats import get_inventory_stats
from grocery.services.stock import adjust_stock, bulk_adjust_stock

router = APIRouter(prefix="/inventory", tags=["inventory"])

SORT_COLUMNS = {
    "name": Product.name,
    "stock": Product.stock,
    "price": Product.price,
    "cost": Product.cost,
    "created_at": Product.created_at,
}


def _escape_like(s: str) -> str:
    """Escape SQL LIKE wildcards in user input."""
    return s.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _stock_status_filter(stock_status: StockStatus):
    threshold = settings.LOW_STOCK_THRESHOLD
    if stock_status == StockStatus.OUT_OF_STOCK:
        return Product.stock == 0
    if stock_status == StockStatus.LOW_STOCK:
        return Product.stock.between(1, threshold)
    return Product.stock > threshold


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    search: str | None = None,
    type_id: UUID | None = None,
    stock_status: StockStatus | None = None,
    sort_by: Literal["name", "stock", "price", "cost", "created_at"] = "name",
    sort_order: Literal["asc", "desc"] = "asc",
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List live products with category and stock status, filtered and paginated."""
    offset = (page - 1) * limit

    query = select(Product).where(Product.is_deleted.is_(False))

    # Apply filters
    if search:
        like = f"%{_escape_like(search)}%"
        query = query.where(Product.name.ilike(like) | Product.description.ilike(like))
    if type_id:
        query = query.where(Product.type_id == type_id)
    if stock_status:
        query = query.where(_stock_status_filter(stock_status))

    # Count total with the same filters
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar_one()

    column = SORT_COLUMNS[sort_by]
    # id as tie-breaker keeps pages disjoint when sort keys repeat
    query = query.order_by(column.asc() if sort_order == "asc" else column.desc(), Product.id)
    result = await db.execute(query.offset(offset).limit(limit))
    items = result.scalars().all()

    return InventoryListResponse(
        items=[ProductResponse.model_validate(p) for p in items],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        ),
    )


@router.get("/stats", response_model=InventoryStats)
async def inventory_stats(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Product count, stock value and stock-band counts. Zeros when the query fails."""
    return await get_inventory_stats(db)


@router.post("", response_model=StockAdjustmentResponse)
async def adjust_product_stock(
    body: StockAdjustmentRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Adjust one product's stock by a signed delta.

    Use positive quantity_change for stock in, negative for stock out.
    The result may never be negative.
    """
    new_stock = await adjust_stock(
        db,
        body.product_id,
        body.quantity_change,
        body.transaction_type,
        body.notes,
    )
    await db.commit()
    return StockAdjustmentResponse(new_stock=new_stock)


@router.put("", response_model=BulkStockAdjustmentResponse)
async def bulk_adjust_product_stock(
    body: BulkStockAdjustmentRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Apply many adjustments; failed items are reported in ``errors`` and skipped."""
    results, errors = await bulk_adjust_stock(db, body.adjustments)
    await db.commit()

    message = f"Processed {len(results)} adjustments"
    if errors:
        message += f" with {len(errors)} errors"
    return BulkStockAdjustmentResponse(message=message, results=results, errors=errors)
