"""Walk-in sale processing.

A bulk sale first tries the server-side procedure configured in
``settings.BULK_SALE_PROCEDURE``, which decrements stock and inserts the sale
rows under one transaction boundary inside the database. Any database error
from that call (the procedure missing included) falls back to the manual path:

1. fetch every referenced product in one query;
2. reject the whole batch, with one combined message, if any product is
   missing or short;
3. per line: insert the sale row, decrement stock with a conditional update,
   append a ``sale`` inventory transaction.

The manual path is all-or-nothing: any failure in step 3 propagates and the
router never commits, so no line of the batch persists.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import bindparam, cast, func, select
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grocery.core.config import settings
from grocery.core.exceptions import InsufficientStockError, NegativeStockError, NotFoundError, StockConflictError
from grocery.models.inventory import TransactionType
from grocery.models.product import Product
from grocery.models.sale import PaymentMethod, Sale
from grocery.schemas.sale import SaleItemCreate, SaleRecord
from grocery.services.stock import apply_stock_delta, record_transaction

logger = logging.getLogger(__name__)


async def process_bulk_sale(
    db: AsyncSession,
    items: list[SaleItemCreate],
    payment_method: PaymentMethod,
) -> list[SaleRecord]:
    procedure = settings.BULK_SALE_PROCEDURE
    if procedure:
        records = await _run_bulk_procedure(db, procedure, items, payment_method)
        if records is not None:
            return records
        logger.warning("Falling back to manual sale processing")
    return await process_sales_manually(db, items, payment_method)


async def record_sale(db: AsyncSession, item: SaleItemCreate, payment_method: PaymentMethod) -> SaleRecord:
    """Single-line sale. Unknown products are a 404 here rather than a shortfall."""
    exists = await db.execute(
        select(Product.id).where(Product.id == item.product_id, Product.is_deleted.is_(False))
    )
    if exists.scalar_one_or_none() is None:
        raise NotFoundError("Product not found")
    records = await process_sales_manually(db, [item], payment_method)
    return records[0]


async def _run_bulk_procedure(
    db: AsyncSession,
    procedure: str,
    items: list[SaleItemCreate],
    payment_method: PaymentMethod,
) -> list[SaleRecord] | None:
    """Call the bulk procedure in a SAVEPOINT. Returns None when it errored."""
    payload = [
        {"product_id": str(item.product_id), "qty": item.qty, "unit_price": str(item.unit_price)}
        for item in items
    ]
    stmt = select(
        getattr(func, procedure)(
            cast(bindparam("p_sales", payload, type_=JSONB), JSONB),
            bindparam("p_payment_method", payment_method.value),
            type_=JSONB,
        )
    )
    try:
        async with db.begin_nested():
            result = await db.execute(stmt)
            rows = result.scalar_one()
    except SQLAlchemyError as exc:
        logger.warning(f"Bulk sale procedure '{procedure}' failed: {exc}")
        return None
    return [SaleRecord.model_validate(row) for row in rows or []]


def _collect_shortfalls(items: list[SaleItemCreate], products: dict) -> list[str]:
    """Messages for every missing product and every line exceeding known stock.

    Lines for the same product are checked against their running total.
    """
    shortfalls: list[str] = []
    requested: dict[uuid.UUID, int] = {}
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            shortfalls.append(f"Product {item.product_id} not found")
            continue
        requested[item.product_id] = requested.get(item.product_id, 0) + item.qty
        if product.stock < requested[item.product_id]:
            shortfalls.append(
                f"Insufficient stock for {product.name}. "
                f"Available: {product.stock}, Requested: {requested[item.product_id]}"
            )
    return shortfalls


async def process_sales_manually(
    db: AsyncSession,
    items: list[SaleItemCreate],
    payment_method: PaymentMethod,
) -> list[SaleRecord]:
    product_ids = list({item.product_id for item in items})
    result = await db.execute(
        select(Product.id, Product.name, Product.stock).where(
            Product.id.in_(product_ids),
            Product.is_deleted.is_(False),
        )
    )
    products = {row.id: row for row in result.all()}

    shortfalls = _collect_shortfalls(items, products)
    if shortfalls:
        raise InsufficientStockError(shortfalls)

    sold_at = datetime.now(timezone.utc)
    records: list[SaleRecord] = []
    for item in items:
        product = products[item.product_id]
        sale = Sale(
            id=uuid.uuid4(),
            product_id=item.product_id,
            qty=item.qty,
            unit_price=item.unit_price,
            subtotal=item.qty * item.unit_price,
            payment_method=payment_method,
            sale_date=sold_at,
        )
        db.add(sale)
        await db.flush()

        try:
            await apply_stock_delta(db, item.product_id, -item.qty)
        except NegativeStockError as exc:
            raise StockConflictError(
                f"Stock for {product.name} changed during the sale. "
                f"Available: {exc.current_stock}, Requested: {item.qty}"
            ) from exc

        await record_transaction(
            db,
            item.product_id,
            TransactionType.SALE,
            -item.qty,
            notes=f"Sale: -{item.qty} units",
            reference_id=str(sale.id),
            reference_type="sale",
        )

        records.append(
            SaleRecord(
                id=sale.id,
                product_id=sale.product_id,
                qty=sale.qty,
                unit_price=sale.unit_price,
                subtotal=sale.subtotal,
                payment_method=sale.payment_method,
                sale_date=sale.sale_date,
                product_name=product.name,
            )
        )

    logger.info(f"Recorded {len(records)} sale lines ({payment_method.value})")
    return records
