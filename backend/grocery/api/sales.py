"""Walk-in sale endpoints (admin only)."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grocery.core.config import settings
from grocery.core.deps import require_admin
from grocery.db.base import get_db
from grocery.models.sale import Sale
from grocery.schemas.auth import CurrentUser
from grocery.schemas.sale import (
    BulkSaleCreate,
    BulkSaleResponse,
    SaleCreate,
    SaleListResponse,
    SaleResponse,
    SingleSaleResponse,
    TodayStats,
)
from grocery.services.sales import process_bulk_sale, record_sale
from grocery.services.stats import get_today_stats

router = APIRouter(prefix="/sales", tags=["sales"])


@router.get("", response_model=SaleListResponse)
async def list_sales(
    limit: int = Query(settings.SALES_HISTORY_LIMIT, ge=1, le=settings.SALES_HISTORY_LIMIT),
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Most recent sales first, each with its product and category."""
    result = await db.execute(select(Sale).order_by(Sale.sale_date.desc()).limit(limit))
    sales = result.scalars().all()
    return SaleListResponse(sales=[SaleResponse.model_validate(s) for s in sales])


@router.get("/today-stats", response_model=TodayStats)
async def today_stats(
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Totals since local midnight. Zeros when the query fails."""
    return await get_today_stats(db)


@router.post("", response_model=SingleSaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    body: SaleCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Record a single sale line and decrement its product's stock."""
    sale = await record_sale(db, body, body.payment_method)
    await db.commit()
    return SingleSaleResponse(sale=sale)


@router.post("/bulk", response_model=BulkSaleResponse, status_code=status.HTTP_201_CREATED)
async def create_bulk_sale(
    body: BulkSaleCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a multi-line walk-in sale as one unit.

    Either every line is recorded and every stock decremented, or nothing is.
    """
    sales = await process_bulk_sale(db, body.sales, body.payment_method)
    await db.commit()
    return BulkSaleResponse(sales=sales, message=f"{len(body.sales)} items processed successfully")
