"""Read-only aggregations for the dashboard cards."""

import logging
from datetime import datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grocery.core.config import settings
from grocery.models.product import Product
from grocery.models.sale import Sale
from grocery.schemas.inventory import InventoryStats
from grocery.schemas.sale import TodayStats, TopProduct

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def start_of_day(now: datetime | None = None) -> datetime:
    """Local midnight (in settings.TIMEZONE) of the day containing ``now``."""
    tz = ZoneInfo(settings.TIMEZONE)
    now = now.astimezone(tz) if now else datetime.now(tz)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


async def get_inventory_stats(db: AsyncSession) -> InventoryStats:
    threshold = settings.LOW_STOCK_THRESHOLD
    query = select(
        func.count(Product.id),
        func.coalesce(func.sum(Product.stock * Product.cost), 0),
        func.count(Product.id).filter(and_(Product.stock > 0, Product.stock <= threshold)),
        func.count(Product.id).filter(Product.stock == 0),
    ).where(Product.is_deleted.is_(False))

    try:
        result = await db.execute(query)
        total, stock_value, low_stock, out_of_stock = result.one()
    except SQLAlchemyError:
        logger.exception("Failed to compute inventory stats")
        return InventoryStats()

    return InventoryStats(
        total_products=total or 0,
        total_stock_value=Decimal(stock_value or 0).quantize(CENTS),
        low_stock_products=low_stock or 0,
        out_of_stock_products=out_of_stock or 0,
    )


async def get_today_stats(db: AsyncSession, now: datetime | None = None) -> TodayStats:
    """Totals for sales since local midnight plus the best sellers by quantity."""
    since = start_of_day(now)
    try:
        result = await db.execute(
            select(Sale.product_id, Sale.qty, Sale.subtotal).where(Sale.sale_date >= since)
        )
        rows = result.all()

        total_sales = Decimal("0")
        total_items = 0
        quantities: dict = {}
        for product_id, qty, subtotal in rows:
            total_sales += subtotal
            total_items += qty
            quantities[product_id] = quantities.get(product_id, 0) + qty

        top = sorted(quantities.items(), key=lambda kv: kv[1], reverse=True)[: settings.TOP_PRODUCTS_LIMIT]
        names: dict = {}
        if top:
            name_result = await db.execute(
                select(Product.id, Product.name).where(Product.id.in_([pid for pid, _ in top]))
            )
            names = dict(name_result.all())
    except SQLAlchemyError:
        logger.exception("Failed to compute today's sales stats")
        return TodayStats()

    return TodayStats(
        total_sales=total_sales,
        total_items=total_items,
        total_transactions=len(rows),
        top_products=[
            TopProduct(name=names.get(pid, "Unknown product"), quantity=qty) for pid, qty in top
        ],
    )
