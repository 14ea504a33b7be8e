"""Product catalogue endpoints."""

import logging
import uuid
from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value

from grocery.core.deps import get_current_user, require_admin
from grocery.core.exceptions import StockConflictError
from grocery.db.base import get_db
from grocery.models.category import ProductType
from grocery.models.inventory import TransactionType
from grocery.models.product import Product
from grocery.schemas.auth import CurrentUser
from grocery.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductEnvelope,
    SaleableProduct,
    SaleableProductListResponse,
)
from grocery.services.stock import record_transaction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

PRICE_BELOW_COST = "Price must be greater than or equal to cost"


async def _get_live_product(db: AsyncSession, product_id: UUID) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.is_deleted.is_(False))
    )
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return product


async def _get_or_create_type(db: AsyncSession, name: str) -> ProductType:
    result = await db.execute(select(ProductType).where(ProductType.name == name))
    product_type = result.scalar_one_or_none()
    if product_type:
        return product_type

    product_type = ProductType(id=uuid.uuid4(), name=name)
    db.add(product_type)
    await db.flush()
    logger.info(f"Created product type '{name}'")
    return product_type


async def _set_stock_if_unchanged(db: AsyncSession, product: Product, expected: int, **values) -> None:
    """Write ``values`` only while stock still equals ``expected``; 409 otherwise.

    The ORM instance is synced without being marked dirty, so the next flush
    does not write the same columns again unguarded.
    """
    result = await db.execute(
        update(Product)
        .where(
            Product.id == product.id,
            Product.is_deleted.is_(False),
            Product.stock == expected,
        )
        .values(**values)
        .returning(Product.id)
        .execution_options(synchronize_session=False)
    )
    if result.scalar_one_or_none() is None:
        raise StockConflictError(
            f"Stock for {product.name} changed while it was being edited. Reload and try again"
        )
    for key, value in values.items():
        set_committed_value(product, key, value)


@router.get("/list", response_model=SaleableProductListResponse)
async def list_saleable_products(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Products with stock on hand, for the sale screen."""
    result = await db.execute(
        select(Product)
        .where(Product.is_deleted.is_(False), Product.stock >= 1)
        .order_by(Product.name)
    )
    products = result.scalars().all()
    return SaleableProductListResponse(
        products=[
            SaleableProduct(
                id=p.id,
                name=p.name,
                price=p.price,
                stock=p.stock,
                type=p.product_type.name if p.product_type else "Uncategorized",
                type_id=p.type_id,
            )
            for p in products
        ]
    )


@router.post("", response_model=ProductEnvelope, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a product, creating its category by name if it does not exist yet."""
    # Checked before the category lookup so a rejected request writes nothing
    if data.price < data.cost:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PRICE_BELOW_COST)

    product_type = await _get_or_create_type(db, data.type)

    product = Product(
        id=uuid.uuid4(),
        name=data.name,
        description=data.description,
        cost=data.cost,
        price=data.price,
        stock=data.stock,
        type_id=product_type.id,
        product_type=product_type,
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)
    return ProductEnvelope(message="Product created successfully", product=ProductResponse.model_validate(product))


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ProductResponse.model_validate(await _get_live_product(db, product_id))


@router.put("/{product_id}", response_model=ProductEnvelope)
async def update_product(
    product_id: UUID,
    data: ProductUpdate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Edit a product. A changed stock value is recorded as an adjustment."""
    if data.price < data.cost:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=PRICE_BELOW_COST)

    product = await _get_live_product(db, product_id)

    if data.name != product.name:
        duplicate = await db.execute(
            select(Product.id).where(
                Product.name == data.name,
                Product.id != product_id,
                Product.is_deleted.is_(False),
            )
        )
        if duplicate.scalar_one_or_none():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product with this name already exists",
            )

    if data.type_id is not None and data.type_id != product.type_id:
        found = await db.execute(select(ProductType.id).where(ProductType.id == data.type_id))
        if found.scalar_one_or_none() is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product type not found")

    old_stock = product.stock
    for key, value in data.model_dump(exclude={"stock"}).items():
        setattr(product, key, value)
    await db.flush()

    if data.stock != old_stock:
        await _set_stock_if_unchanged(db, product, old_stock, stock=data.stock)
        await record_transaction(
            db,
            product.id,
            TransactionType.ADJUSTMENT,
            data.stock - old_stock,
            notes=f"Product edit: Stock adjusted from {old_stock} to {data.stock}",
        )

    await db.commit()
    await db.refresh(product)
    return ProductEnvelope(message="Product updated successfully", product=ProductResponse.model_validate(product))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Soft-delete a product. Remaining stock is written off in the audit trail."""
    product = await _get_live_product(db, product_id)

    old_stock = product.stock
    await _set_stock_if_unchanged(
        db,
        product,
        old_stock,
        stock=0,
        is_deleted=True,
        deleted_at=datetime.now(timezone.utc),
    )

    if old_stock > 0:
        await record_transaction(
            db,
            product.id,
            TransactionType.ADJUSTMENT,
            -old_stock,
            notes=f"Product deleted: {old_stock} units removed from inventory",
        )

    await db.commit()
    logger.info(f"Product {product_id} deleted ({old_stock} units written off)")
