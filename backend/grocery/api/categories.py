"""Product type (category) endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from grocery.core.deps import get_current_user
from grocery.db.base import get_db
from grocery.models.category import ProductType
from grocery.schemas.auth import CurrentUser
from grocery.schemas.product import ProductTypeListResponse, ProductTypeResponse

router = APIRouter(prefix="/product-types", tags=["product-types"])


@router.get("", response_model=ProductTypeListResponse)
async def list_product_types(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """All product types, ordered by name."""
    result = await db.execute(select(ProductType).order_by(ProductType.name))
    product_types = result.scalars().all()
    return ProductTypeListResponse(
        product_types=[ProductTypeResponse.model_validate(t) for t in product_types]
    )
