"""Unit tests for dashboard aggregations."""

from datetime import datetime, timezone
from decimal import Decimal
import uuid

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from grocery.services.stats import get_inventory_stats, get_today_stats, start_of_day


def test_start_of_day_is_local_midnight():
    now = datetime(2026, 10, 19, 15, 30, 12, tzinfo=timezone.utc)
    midnight = start_of_day(now)
    assert midnight == datetime(2026, 10, 19, tzinfo=timezone.utc)


# ── Today's sales ──────────────────────────────────

@pytest.mark.asyncio
async def test_today_stats_no_sales_returns_zeros(mock_db, make_result):
    mock_db.execute.side_effect = [make_result(rows=[])]

    stats = await get_today_stats(mock_db)

    assert stats.model_dump(by_alias=True) == {
        "totalSales": Decimal("0"),
        "totalItems": 0,
        "totalTransactions": 0,
        "topProducts": [],
    }
    # No name lookup without sales
    assert mock_db.execute.await_count == 1


@pytest.mark.asyncio
async def test_today_stats_totals_and_top_products(mock_db, make_result):
    rice, milk, eggs = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    mock_db.execute.side_effect = [
        make_result(rows=[
            (rice, 2, Decimal("25.00")),
            (milk, 5, Decimal("10.00")),
            (rice, 1, Decimal("12.50")),
            (eggs, 1, Decimal("4.20")),
        ]),
        make_result(rows=[(rice, "Rice"), (milk, "Milk")]),
    ]

    stats = await get_today_stats(mock_db)

    assert stats.total_sales == Decimal("51.70")
    assert stats.total_items == 9
    assert stats.total_transactions == 4
    assert [(p.name, p.quantity) for p in stats.top_products] == [
        ("Milk", 5),
        ("Rice", 3),
        ("Unknown product", 1),
    ]


@pytest.mark.asyncio
async def test_today_stats_database_error_returns_zeros(mock_db):
    mock_db.execute.side_effect = OperationalError("SELECT ...", {}, Exception("connection refused"))

    stats = await get_today_stats(mock_db)

    assert stats.total_sales == Decimal("0")
    assert stats.total_transactions == 0
    assert stats.top_products == []


# ── Inventory ──────────────────────────────────────

@pytest.mark.asyncio
async def test_inventory_stats(mock_db, make_result):
    mock_db.execute.side_effect = [make_result(one=(4, Decimal("1234.567"), 2, 1))]

    stats = await get_inventory_stats(mock_db)

    assert stats.model_dump(by_alias=True) == {
        "totalProducts": 4,
        "totalStockValue": Decimal("1234.57"),
        "lowStockProducts": 2,
        "outOfStockProducts": 1,
    }


@pytest.mark.asyncio
async def test_inventory_stats_empty_catalogue(mock_db, make_result):
    mock_db.execute.side_effect = [make_result(one=(0, 0, 0, 0))]

    stats = await get_inventory_stats(mock_db)

    assert stats.total_products == 0
    assert stats.total_stock_value == Decimal("0.00")


@pytest.mark.asyncio
async def test_inventory_stats_database_error_returns_zeros(mock_db):
    mock_db.execute.side_effect = SQLAlchemyError("boom")

    stats = await get_inventory_stats(mock_db)

    assert stats.total_products == 0
    assert stats.out_of_stock_products == 0
