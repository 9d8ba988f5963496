"""Admin router: users, roles, shop-owner availability, and platform stats."""

import uuid

from fastapi import APIRouter, Depends, Request
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.rate_limit import admin_limit
from libs.db.session import get_async_db
from services.laundry_service.schemas import (
    AdminStatsResponse,
    AvailableOwnerResponse,
    UserResponse,
    UserRoleUpdate,
)
from services.laundry_service.services import account_service, shop_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/available-owners", response_model=list[AvailableOwnerResponse])
async def list_available_owners(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Shop owners that don't have a shop yet."""
    return await shop_service.list_available_owners(db)


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """List all accounts, newest first."""
    return await account_service.list_users(db)


@router.patch("/users/{user_id}", response_model=UserResponse)
@admin_limit
async def update_user_role(
    request: Request,
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Change a user's role."""
    return await account_service.change_user_role(db, user_id, current_user, payload)


@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Headline counts for the admin dashboard."""
    return await account_service.get_admin_stats(db)
