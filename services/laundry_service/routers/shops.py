"""Shops router: shop directory, registration, approval, and services."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_current_user, require_admin, require_shop_owner
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.laundry_service.schemas import (
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
    ShopCreate,
    ShopResponse,
    ShopUpdate,
)
from services.laundry_service.services import shop_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/shops", tags=["shops"])


# ============================================================================
# SERVICES (caller's own shop)
# Registered before /{shop_id} so "services" is not parsed as a shop id.
# ============================================================================


@router.get("/services", response_model=list[ServiceResponse])
async def list_my_services(
    current_user: AuthUser = Depends(require_shop_owner),
    db: AsyncSession = Depends(get_async_db),
):
    """List services offered by the caller's shop."""
    return await shop_service.list_own_services(db, current_user)


@router.post(
    "/services", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED
)
async def create_service(
    payload: ServiceCreate,
    current_user: AuthUser = Depends(require_shop_owner),
    db: AsyncSession = Depends(get_async_db),
):
    """Add a service to the caller's shop."""
    return await shop_service.create_service(db, current_user, payload)


@router.patch("/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: uuid.UUID,
    payload: ServiceUpdate,
    current_user: AuthUser = Depends(require_shop_owner),
    db: AsyncSession = Depends(get_async_db),
):
    """Edit one of the caller's services. Placed orders keep their prices."""
    return await shop_service.update_service(db, service_id, current_user, payload)


# ============================================================================
# SHOPS
# ============================================================================


@router.get("", response_model=list[ShopResponse])
async def list_shops(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List shops visible to the caller."""
    return await shop_service.list_shops(db, current_user)


@router.post("", response_model=ShopResponse, status_code=status.HTTP_201_CREATED)
async def create_shop(
    payload: ShopCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Register a shop for an available owner."""
    return await shop_service.create_shop(db, current_user, payload)


@router.get("/{shop_id}", response_model=ShopResponse)
async def get_shop(
    shop_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a shop with its services."""
    return await shop_service.get_shop(db, shop_id, current_user)


@router.patch("/{shop_id}", response_model=ShopResponse)
async def update_shop(
    shop_id: uuid.UUID,
    payload: ShopUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update shop details; approval is admin-only."""
    return await shop_service.update_shop(db, shop_id, current_user, payload)
