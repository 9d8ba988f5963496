"""Orders router: checkout, order history, and lifecycle updates."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.rate_limit import checkout_limit
from libs.db.session import get_async_db
from services.laundry_service.models import OrderStatus
from services.laundry_service.schemas import OrderCreate, OrderResponse, OrderUpdate
from services.laundry_service.services import order_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/orders", tags=["orders"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@checkout_limit
async def create_order(
    request: Request,
    payload: OrderCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order from the customer's cart."""
    return await order_service.create_order(db, current_user, payload)


# ============================================================================
# ORDERS
# ============================================================================


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List the orders the caller can see, newest first."""
    return await order_service.list_orders(db, current_user, status=status_filter)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a single order."""
    return await order_service.get_order(db, order_id, current_user)


@router.patch("/{order_id}", response_model=OrderResponse)
@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    order_id: uuid.UUID,
    payload: OrderUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update status and/or pickup and delivery times."""
    return await order_service.update_order(db, order_id, current_user, payload)
