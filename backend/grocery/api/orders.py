"""Order and pre-order endpoints with guarded status transitions."""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from grocery.core.deps import require_admin
from grocery.db.base import get_db
from grocery.models.order import (
    ORDER_TRANSITIONS,
    PRE_ORDER_TRANSITIONS,
    Order,
    OrderStatus,
    PreOrder,
    PreOrderStatus,
    check_transition,
)
from grocery.schemas.auth import CurrentUser
from grocery.schemas.order import (
    OrderResponse,
    OrderListResponse,
    OrderStatusUpdate,
    PreOrderResponse,
    PreOrderListResponse,
    PreOrderStatusUpdate,
)

router = APIRouter(tags=["orders"])


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=100),
    status_filter: OrderStatus | None = None,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List orders, newest first, optionally filtered by status."""
    offset = (page - 1) * size

    query = select(Order)
    if status_filter:
        query = query.where(Order.status == status_filter)

    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar_one()

    query = query.offset(offset).limit(size).order_by(Order.created_at.desc())
    result = await db.execute(query)
    orders = result.scalars().all()

    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        size=size,
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found",
        )

    return OrderResponse.model_validate(order)


@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    body: OrderStatusUpdate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Move an order along pending -> paid -> ready_for_pickup -> completed, or cancel it."""
    result = await db.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()

    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Order not found",
        )

    check_transition(ORDER_TRANSITIONS, order.status, body.status)

    order.status = body.status
    if body.status == OrderStatus.PAID and order.paid_at is None:
        order.paid_at = datetime.now(timezone.utc)

    await db.commit()
    await db.refresh(order)

    return OrderResponse.model_validate(order)


@router.get("/pre-orders", response_model=PreOrderListResponse)
async def list_pre_orders(
    page: int = Query(1, ge=1),
    size: int = Query(50, ge=1, le=100),
    status_filter: PreOrderStatus | None = None,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    offset = (page - 1) * size

    query = select(PreOrder)
    if status_filter:
        query = query.where(PreOrder.status == status_filter)

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    query = query.offset(offset).limit(size).order_by(PreOrder.created_at.desc())
    result = await db.execute(query)
    pre_orders = result.scalars().all()

    return PreOrderListResponse(
        items=[PreOrderResponse.model_validate(p) for p in pre_orders],
        total=total,
        page=page,
        size=size,
    )


@router.patch("/pre-orders/{pre_order_id}/status", response_model=PreOrderResponse)
async def update_pre_order_status(
    pre_order_id: UUID,
    body: PreOrderStatusUpdate,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Move a pre-order along pending -> approved -> ready_for_pickup -> completed, or cancel it."""
    result = await db.execute(select(PreOrder).where(PreOrder.id == pre_order_id))
    pre_order = result.scalar_one_or_none()

    if not pre_order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Pre-order not found",
        )

    check_transition(PRE_ORDER_TRANSITIONS, pre_order.status, body.status)

    pre_order.status = body.status
    if body.status == PreOrderStatus.APPROVED and pre_order.paid_at is None:
        pre_order.paid_at = datetime.now(timezone.utc)
    if body.pickup_time is not None:
        pre_order.pickup_time = body.pickup_time

    await db.commit()
    await db.refresh(pre_order)

    return PreOrderResponse.model_validate(pre_order)
