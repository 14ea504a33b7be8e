"""Stock reconciliation: conditional stock updates plus the inventory audit trail.

Every stock mutation goes through :func:`apply_stock_delta`, which performs the
read-modify-write as one conditional UPDATE so a decrement can never be applied
against a stale read. The audit row is written afterwards by
:func:`record_transaction`, whose failure policy follows
``settings.AUDIT_DURABILITY``:

- ``best_effort``: the audit insert runs in its own SAVEPOINT; on failure only
  that savepoint is rolled back and the error is logged. The stock value stays
  authoritative even if the trail misses an entry.
- ``strict``: the failure is raised as :class:`AuditLogError` and the caller's
  transaction (stock write included) is rolled back.

Nothing here commits; routers own the request transaction.
"""

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from grocery.core.config import settings
from grocery.core.exceptions import AuditLogError, GroceryError, NegativeStockError, NotFoundError
from grocery.models.inventory import InventoryTransaction, TransactionType
from grocery.models.product import Product
from grocery.schemas.inventory import AdjustmentError, AdjustmentResult, StockAdjustmentRequest

logger = logging.getLogger(__name__)


def default_note(transaction_type: TransactionType | str, quantity_change: int) -> str:
    """``"restock: +5 units"`` / ``"adjustment: -3 units"``."""
    label = TransactionType(transaction_type).value
    sign = "+" if quantity_change > 0 else ""
    return f"{label}: {sign}{quantity_change} units"


async def apply_stock_delta(db: AsyncSession, product_id: UUID, quantity_change: int) -> int:
    """Add ``quantity_change`` to a live product's stock and return the new value.

    Raises NotFoundError for unknown or deleted products and NegativeStockError
    when the result would drop below zero. No write happens in either case.
    """
    result = await db.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.is_deleted.is_(False),
            Product.stock + quantity_change >= 0,
        )
        .values(stock=Product.stock + quantity_change)
        .returning(Product.stock)
    )
    new_stock = result.scalar_one_or_none()
    if new_stock is not None:
        return new_stock

    # Nothing matched: find out whether the row is missing or the guard failed
    current = await db.execute(
        select(Product.stock).where(Product.id == product_id, Product.is_deleted.is_(False))
    )
    current_stock = current.scalar_one_or_none()
    if current_stock is None:
        raise NotFoundError("Product not found")
    raise NegativeStockError(product_id, current_stock, quantity_change)


async def record_transaction(
    db: AsyncSession,
    product_id: UUID,
    transaction_type: TransactionType,
    quantity_change: int,
    notes: str | None = None,
    reference_id: str | None = None,
    reference_type: str | None = None,
) -> InventoryTransaction | None:
    """Append one audit row. Returns None when a best-effort write failed."""
    entry = InventoryTransaction(
        product_id=product_id,
        transaction_type=transaction_type,
        quantity_change=quantity_change,
        notes=notes or default_note(transaction_type, quantity_change),
        reference_id=reference_id,
        reference_type=reference_type,
    )
    try:
        async with db.begin_nested():
            db.add(entry)
            await db.flush()
    except SQLAlchemyError as exc:
        if settings.AUDIT_DURABILITY == "strict":
            raise AuditLogError("Failed to record inventory transaction") from exc
        logger.error(f"Inventory transaction not recorded for product {product_id}: {exc}")
        return None
    return entry


async def adjust_stock(
    db: AsyncSession,
    product_id: UUID,
    quantity_change: int,
    transaction_type: TransactionType | str,
    notes: str | None = None,
) -> int:
    """Single stock adjustment: conditional update, then the audit row."""
    transaction_type = TransactionType(transaction_type)
    new_stock = await apply_stock_delta(db, product_id, quantity_change)
    await record_transaction(db, product_id, transaction_type, quantity_change, notes)
    logger.info(f"Stock {transaction_type.value} for product {product_id}: {quantity_change:+d} -> {new_stock}")
    return new_stock


async def bulk_adjust_stock(
    db: AsyncSession,
    adjustments: list[StockAdjustmentRequest],
) -> tuple[list[AdjustmentResult], list[AdjustmentError]]:
    """Apply adjustments in order, each isolated in its own SAVEPOINT.

    A failing item is reported in the errors list and leaves no trace; the
    remaining items still go through.
    """
    results: list[AdjustmentResult] = []
    errors: list[AdjustmentError] = []

    for adjustment in adjustments:
        try:
            async with db.begin_nested():
                new_stock = await adjust_stock(
                    db,
                    adjustment.product_id,
                    adjustment.quantity_change,
                    adjustment.transaction_type,
                    adjustment.notes,
                )
        except GroceryError as exc:
            errors.append(AdjustmentError(product_id=adjustment.product_id, error=exc.message))
        except SQLAlchemyError:
            logger.exception(f"Bulk adjustment failed for product {adjustment.product_id}")
            errors.append(AdjustmentError(product_id=adjustment.product_id, error="Failed to update stock"))
        else:
            results.append(AdjustmentResult(product_id=adjustment.product_id, new_stock=new_stock))

    return results, errors
