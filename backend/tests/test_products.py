"""Unit tests for Product Management API."""

from decimal import Decimal
import uuid

import pytest
from fastapi import HTTPException

from grocery.core.exceptions import StockConflictError
from grocery.models.category import ProductType
from grocery.models.inventory import InventoryTransaction
from grocery.models.product import Product, StockStatus, stock_status_for
from grocery.schemas.product import ProductCreate, ProductResponse, ProductUpdate


def _product(**overrides):
    fields = dict(
        id=uuid.uuid4(),
        name="Whole Milk 1L",
        description=None,
        cost=Decimal("0.80"),
        price=Decimal("1.20"),
        stock=10,
        is_deleted=False,
    )
    fields.update(overrides)
    return Product(**fields)


# ── Stock status ───────────────────────────────────

def test_stock_status_bands():
    assert stock_status_for(0, threshold=10) == StockStatus.OUT_OF_STOCK
    assert stock_status_for(1, threshold=10) == StockStatus.LOW_STOCK
    assert stock_status_for(10, threshold=10) == StockStatus.LOW_STOCK
    assert stock_status_for(11, threshold=10) == StockStatus.IN_STOCK


def test_product_response_normalises_category():
    product_type = ProductType(id=uuid.uuid4(), name="Dairy")
    product = _product(product_type=product_type, type_id=product_type.id)

    response = ProductResponse.model_validate(product)

    assert response.category.name == "Dairy"
    assert response.stock_status == StockStatus.LOW_STOCK


# ── Create ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_product_price_below_cost(mock_db, admin_user):
    """Price 5 under cost 6 is rejected before anything is looked up or written."""
    from grocery.api.products import create_product

    data = ProductCreate(name="Olive Oil", type="Pantry", cost=Decimal("6"), price=Decimal("5"), stock=3)

    with pytest.raises(HTTPException) as exc_info:
        await create_product(data, admin_user, mock_db)

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail == "Price must be greater than or equal to cost"
    mock_db.execute.assert_not_awaited()
    mock_db.add.assert_not_called()
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_product_creates_missing_type(mock_db, make_result, admin_user):
    from grocery.api.products import create_product

    mock_db.execute.side_effect = [make_result(scalar=None)]
    data = ProductCreate(name="Olive Oil", type="Pantry", cost=Decimal("6"), price=Decimal("9.50"), stock=30)

    response = await create_product(data, admin_user, mock_db)

    added = [call[0][0] for call in mock_db.add.call_args_list]
    assert isinstance(added[0], ProductType) and added[0].name == "Pantry"
    assert isinstance(added[1], Product) and added[1].type_id == added[0].id
    assert response.message == "Product created successfully"
    assert response.product.category.name == "Pantry"
    assert response.product.stock_status == StockStatus.IN_STOCK
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_product_reuses_existing_type(mock_db, make_result, admin_user):
    from grocery.api.products import create_product

    pantry = ProductType(id=uuid.uuid4(), name="Pantry")
    mock_db.execute.side_effect = [make_result(scalar=pantry)]
    data = ProductCreate(name="Olive Oil", type="Pantry", cost=Decimal("6"), price=Decimal("6"), stock=0)

    response = await create_product(data, admin_user, mock_db)

    mock_db.add.assert_called_once()
    assert response.product.type_id == pantry.id
    assert response.product.stock_status == StockStatus.OUT_OF_STOCK


# ── Read ───────────────────────────────────────────

@pytest.mark.asyncio
async def test_get_product_not_found(mock_db, make_result, admin_user):
    from grocery.api.products import get_product

    mock_db.execute.side_effect = [make_result(scalar=None)]

    with pytest.raises(HTTPException) as exc_info:
        await get_product(uuid.uuid4(), admin_user, mock_db)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_saleable_products_fall_back_to_uncategorized(mock_db, make_result, admin_user):
    from grocery.api.products import list_saleable_products

    dairy = ProductType(id=uuid.uuid4(), name="Dairy")
    mock_db.execute.side_effect = [
        make_result(scalars=[_product(product_type=dairy, type_id=dairy.id), _product(name="Batteries")])
    ]

    response = await list_saleable_products(admin_user, mock_db)

    assert [p.type for p in response.products] == ["Dairy", "Uncategorized"]


@pytest.mark.asyncio
async def test_list_product_types(mock_db, make_result, admin_user):
    from grocery.api.categories import list_product_types

    mock_db.execute.side_effect = [
        make_result(scalars=[ProductType(id=uuid.uuid4(), name="Bakery"), ProductType(id=uuid.uuid4(), name="Dairy")])
    ]

    response = await list_product_types(admin_user, mock_db)

    assert [t.name for t in response.product_types] == ["Bakery", "Dairy"]


# ── Update ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_update_product_stock_change_is_audited(mock_db, make_result, admin_user):
    from grocery.api.products import update_product

    product = _product(stock=10)
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=product.id)]
    data = ProductUpdate(name=product.name, cost=Decimal("0.80"), price=Decimal("1.25"), stock=15)

    response = await update_product(product.id, data, admin_user, mock_db)

    assert response.product.stock == 15
    assert response.product.price == Decimal("1.25")
    entry = mock_db.add.call_args[0][0]
    assert isinstance(entry, InventoryTransaction)
    assert entry.quantity_change == 5
    assert entry.notes == "Product edit: Stock adjusted from 10 to 15"
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_product_without_stock_change_writes_no_audit(mock_db, make_result, admin_user):
    from grocery.api.products import update_product

    product = _product(stock=10)
    mock_db.execute.side_effect = [make_result(scalar=product)]
    data = ProductUpdate(name=product.name, cost=Decimal("0.80"), price=Decimal("1.40"), stock=10)

    await update_product(product.id, data, admin_user, mock_db)

    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_update_product_duplicate_name(mock_db, make_result, admin_user):
    from grocery.api.products import update_product

    product = _product()
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=uuid.uuid4())]
    data = ProductUpdate(name="Skim Milk 1L", cost=Decimal("0.80"), price=Decimal("1.20"), stock=10)

    with pytest.raises(HTTPException) as exc_info:
        await update_product(product.id, data, admin_user, mock_db)

    assert exc_info.value.status_code == 409
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_product_price_below_cost(mock_db, admin_user):
    from grocery.api.products import update_product

    data = ProductUpdate(name="Whole Milk 1L", cost=Decimal("2"), price=Decimal("1"), stock=10)

    with pytest.raises(HTTPException) as exc_info:
        await update_product(uuid.uuid4(), data, admin_user, mock_db)

    assert exc_info.value.status_code == 400
    mock_db.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_product_stock_guarded_by_value_read(mock_db, make_result, admin_user):
    """A sale landing between the read and the write makes the edit a 409, not an overwrite."""
    from grocery.api.products import update_product

    product = _product(stock=10)
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=None)]
    data = ProductUpdate(name=product.name, cost=Decimal("0.80"), price=Decimal("1.20"), stock=12)

    with pytest.raises(StockConflictError) as exc_info:
        await update_product(product.id, data, admin_user, mock_db)

    assert exc_info.value.status_code == 409
    guard = mock_db.execute.call_args_list[1][0][0]
    assert 10 in guard.whereclause.compile().params.values()
    mock_db.add.assert_not_called()
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_product_unknown_type(mock_db, make_result, admin_user):
    from grocery.api.products import update_product

    product = _product()
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=None)]
    data = ProductUpdate(
        name=product.name, type_id=uuid.uuid4(), cost=Decimal("0.80"), price=Decimal("1.20"), stock=10
    )

    with pytest.raises(HTTPException) as exc_info:
        await update_product(product.id, data, admin_user, mock_db)

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Product type not found"
    mock_db.flush.assert_not_awaited()
    mock_db.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_product_moves_to_existing_type(mock_db, make_result, admin_user):
    from grocery.api.products import update_product

    product = _product()
    bakery_id = uuid.uuid4()
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=bakery_id)]
    data = ProductUpdate(
        name=product.name, type_id=bakery_id, cost=Decimal("0.80"), price=Decimal("1.20"), stock=10
    )

    response = await update_product(product.id, data, admin_user, mock_db)

    assert response.product.type_id == bakery_id
    mock_db.commit.assert_awaited_once()


# ── Delete ─────────────────────────────────────────

@pytest.mark.asyncio
async def test_delete_product_writes_off_stock(mock_db, make_result, admin_user):
    from grocery.api.products import delete_product

    product = _product(stock=7)
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=product.id)]

    await delete_product(product.id, admin_user, mock_db)

    assert product.is_deleted is True
    assert product.deleted_at is not None
    assert product.stock == 0
    entry = mock_db.add.call_args[0][0]
    assert entry.quantity_change == -7
    assert entry.notes == "Product deleted: 7 units removed from inventory"
    mock_db.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_product_without_stock_skips_audit(mock_db, make_result, admin_user):
    from grocery.api.products import delete_product

    product = _product(stock=0)
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=product.id)]

    await delete_product(product.id, admin_user, mock_db)

    assert product.is_deleted is True
    mock_db.add.assert_not_called()


@pytest.mark.asyncio
async def test_delete_product_stock_changed_meanwhile(mock_db, make_result, admin_user):
    from grocery.api.products import delete_product

    product = _product(stock=7)
    mock_db.execute.side_effect = [make_result(scalar=product), make_result(scalar=None)]

    with pytest.raises(StockConflictError):
        await delete_product(product.id, admin_user, mock_db)

    assert not product.is_deleted
    mock_db.add.assert_not_called()
    mock_db.commit.assert_not_awaited()
