"""Account operations: registration, login, and admin user management."""

import uuid
from typing import Optional

from libs.auth.models import AuthUser, UserRole
from libs.auth.policies import can_change_user_role, enforce
from libs.auth.security import hash_password, verify_password
from libs.common.error_handler import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.laundry_service.models import AuditEntityType, Order, Shop, User
from services.laundry_service.schemas import (
    AdminStatsResponse,
    RegisterRequest,
    UserRoleUpdate,
)
from services.laundry_service.services._helpers import log_audit, user_uuid
from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SELF_SERVICE_ROLES = {UserRole.CUSTOMER, UserRole.SHOP_OWNER}


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, payload: RegisterRequest) -> User:
    """Create a customer or shop-owner account."""
    if payload.role not in SELF_SERVICE_ROLES:
        raise ValidationError("This role cannot be self-registered", field="role")

    email = payload.email.strip().lower()
    if await get_user_by_email(db, email):
        raise ConflictError("An account with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(payload.password),
        name=payload.name,
        phone=payload.phone,
        role=payload.role,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("An account with this email already exists")
    await db.refresh(user)

    logger.info("Registered %s account %s", user.role.value, user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Check credentials. The error never says which half was wrong."""
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %s", email)
        raise AuthenticationError("Invalid email or password")
    return user


async def get_current_account(db: AsyncSession, identity: AuthUser) -> User:
    user = await db.get(User, user_uuid(identity))
    if not user:
        raise AuthenticationError("Account no longer exists")
    return user


# ============================================================================
# ADMIN
# ============================================================================


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def _owns_shop(db: AsyncSession, user_id: uuid.UUID) -> bool:
    return bool(await db.scalar(select(exists().where(Shop.owner_id == user_id))))


async def change_user_role(
    db: AsyncSession,
    user_id: uuid.UUID,
    identity: Optional[AuthUser],
    payload: UserRoleUpdate,
) -> User:
    enforce(identity, can_change_user_role(identity), "Only admins can change roles")

    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.role == payload.role:
        return user
    if str(user.id) == identity.user_id:
        raise ValidationError("Admins cannot change their own role", field="role")
    if payload.role != UserRole.SHOP_OWNER and await _owns_shop(db, user.id):
        raise ValidationError(
            "Reassign or remove the user's shop first", field="role"
        )

    old_role = user.role
    user.role = payload.role
    await log_audit(
        db,
        AuditEntityType.USER,
        user.id,
        "role_changed",
        identity.user_id,
        old_value={"role": old_role.value},
        new_value={"role": payload.role.value},
    )
    await db.commit()
    await db.refresh(user)

    logger.info(
        "User %s role changed %s -> %s by %s",
        user.id,
        old_role.value,
        user.role.value,
        identity.user_id,
    )
    return user


async def get_admin_stats(db: AsyncSession) -> AdminStatsResponse:
    total_users = await db.scalar(select(func.count()).select_from(User))
    total_shops = await db.scalar(select(func.count()).select_from(Shop))
    pending_shops = await db.scalar(
        select(func.count()).select_from(Shop).where(Shop.is_approved.is_(False))
    )
    total_orders = await db.scalar(select(func.count()).select_from(Order))
    return AdminStatsResponse(
        total_users=total_users or 0,
        total_shops=total_shops or 0,
        pending_shops=pending_shops or 0,
        total_orders=total_orders or 0,
    )
