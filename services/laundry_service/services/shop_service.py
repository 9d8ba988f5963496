"""Shop and catalog operations: registration, approval, visibility, services."""

import uuid
from typing import Optional

from libs.auth.models import AuthUser, UserRole
from libs.auth.policies import (
    Action,
    ServiceFacts,
    ShopFacts,
    can_access_service,
    can_access_shop,
    can_change_shop_approval,
    enforce,
)
from libs.common.error_handler import NotFoundError, ValidationError
from libs.common.logging import get_logger
from services.laundry_service.models import AuditEntityType, Service, Shop, User
from services.laundry_service.schemas import (
    ServiceCreate,
    ServiceUpdate,
    ShopCreate,
    ShopUpdate,
)
from services.laundry_service.services._helpers import (
    audit_snapshot,
    log_audit,
    user_uuid,
)
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

# Columns that may be cleared with an explicit null
NULLABLE_SHOP_FIELDS = {"description"}
NULLABLE_SERVICE_FIELDS = {"description"}


def _changes(payload, nullable: set[str]) -> dict:
    """Fields the client actually sent, minus nulls for required columns."""
    return {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or field in nullable
    }


def shop_facts(shop: Shop) -> ShopFacts:
    return ShopFacts(owner_id=str(shop.owner_id), is_approved=shop.is_approved)


def _shop_query():
    return select(Shop).options(selectinload(Shop.services), selectinload(Shop.owner))


async def load_shop(db: AsyncSession, shop_id: uuid.UUID) -> Shop:
    result = await db.execute(
        _shop_query()
        .where(Shop.id == shop_id)
        .execution_options(populate_existing=True)
    )
    shop = result.scalar_one_or_none()
    if not shop:
        raise NotFoundError("Shop not found")
    return shop


# ============================================================================
# OWNERS
# ============================================================================


def available_owners_query():
    """Shop-owner accounts with no shop row (left anti-join)."""
    return (
        select(User)
        .outerjoin(Shop, Shop.owner_id == User.id)
        .where(User.role == UserRole.SHOP_OWNER, Shop.id.is_(None))
    )


async def list_available_owners(db: AsyncSession) -> list[User]:
    result = await db.execute(available_owners_query().order_by(User.name))
    return list(result.scalars().all())


async def is_available_owner(db: AsyncSession, user_id: uuid.UUID) -> bool:
    result = await db.execute(available_owners_query().where(User.id == user_id))
    return result.scalar_one_or_none() is not None


# ============================================================================
# SHOPS
# ============================================================================


async def list_shops(db: AsyncSession, identity: AuthUser) -> list[Shop]:
    """Shops the caller may see. Customers only ever get approved shops."""
    query = _shop_query().order_by(Shop.created_at.desc())
    if not identity.is_admin:
        if identity.role == UserRole.SHOP_OWNER:
            query = query.where(
                or_(Shop.is_approved.is_(True), Shop.owner_id == user_uuid(identity))
            )
        else:
            query = query.where(Shop.is_approved.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_shop(
    db: AsyncSession, shop_id: uuid.UUID, identity: Optional[AuthUser]
) -> Shop:
    shop = await load_shop(db, shop_id)
    enforce(identity, True)
    # Unapproved shops don't exist as far as customers are concerned
    if not can_access_shop(identity, Action.READ, shop_facts(shop)):
        raise NotFoundError("Shop not found")
    return shop


async def create_shop(
    db: AsyncSession, identity: Optional[AuthUser], payload: ShopCreate
) -> Shop:
    """Register a shop for an owner who doesn't have one yet (admin only)."""
    enforce(
        identity,
        can_access_shop(identity, Action.CREATE),
        "Only admins can register shops",
    )

    owner = await db.get(User, payload.owner_id)
    if not owner:
        raise NotFoundError("Owner not found")
    if not await is_available_owner(db, owner.id):
        raise ValidationError(
            "Owner must be a shop owner without a shop", field="ownerId"
        )

    shop = Shop(**payload.model_dump(), is_approved=False)
    db.add(shop)
    await db.flush()

    await log_audit(
        db,
        AuditEntityType.SHOP,
        shop.id,
        "created",
        identity.user_id,
        new_value=audit_snapshot({"name": shop.name, "owner_id": owner.id}),
    )
    await db.commit()

    logger.info("Shop %s (%s) created for owner %s", shop.id, shop.name, owner.id)
    return await load_shop(db, shop.id)


async def update_shop(
    db: AsyncSession,
    shop_id: uuid.UUID,
    identity: Optional[AuthUser],
    payload: ShopUpdate,
) -> Shop:
    shop = await load_shop(db, shop_id)
    enforce(identity, can_access_shop(identity, Action.UPDATE, shop_facts(shop)))

    changes = _changes(payload, NULLABLE_SHOP_FIELDS)
    if "is_approved" in changes:
        enforce(
            identity,
            can_change_shop_approval(identity),
            "Only admins can change shop approval",
        )

    old_values = {}
    for field, value in changes.items():
        if getattr(shop, field) != value:
            old_values[field] = getattr(shop, field)
            setattr(shop, field, value)
    if not old_values:
        return shop

    action = "updated"
    if set(old_values) == {"is_approved"}:
        action = "approved" if shop.is_approved else "unapproved"
    await log_audit(
        db,
        AuditEntityType.SHOP,
        shop.id,
        action,
        identity.user_id,
        old_value=audit_snapshot(old_values),
        new_value=audit_snapshot({field: changes[field] for field in old_values}),
    )
    await db.commit()

    logger.info("Shop %s %s by %s", shop.id, action, identity.user_id)
    return await load_shop(db, shop.id)


# ============================================================================
# SERVICES
# ============================================================================


async def get_owned_shop(db: AsyncSession, identity: AuthUser) -> Shop:
    """The caller's own shop."""
    result = await db.execute(
        _shop_query()
        .where(Shop.owner_id == user_uuid(identity))
        .execution_options(populate_existing=True)
    )
    shop = result.scalar_one_or_none()
    if not shop:
        raise NotFoundError("No shop is registered to this account")
    return shop


async def list_own_services(db: AsyncSession, identity: AuthUser) -> list[Service]:
    shop = await get_owned_shop(db, identity)
    enforce(identity, can_access_service(identity, Action.READ))
    return list(shop.services)


async def create_service(
    db: AsyncSession, identity: AuthUser, payload: ServiceCreate
) -> Service:
    shop = await get_owned_shop(db, identity)
    enforce(
        identity,
        can_access_service(
            identity, Action.CREATE, ServiceFacts(shop_owner_id=str(shop.owner_id))
        ),
    )

    service = Service(shop_id=shop.id, **payload.model_dump())
    db.add(service)
    await db.flush()

    await log_audit(
        db,
        AuditEntityType.SERVICE,
        service.id,
        "created",
        identity.user_id,
        new_value=audit_snapshot({"name": service.name, "price": service.price}),
    )
    await db.commit()
    await db.refresh(service)

    logger.info("Service %s (%s) added to shop %s", service.id, service.name, shop.id)
    return service


async def update_service(
    db: AsyncSession,
    service_id: uuid.UUID,
    identity: AuthUser,
    payload: ServiceUpdate,
) -> Service:
    result = await db.execute(
        select(Service).where(Service.id == service_id).options(selectinload(Service.shop))
    )
    service = result.scalar_one_or_none()
    if not service:
        raise NotFoundError("Service not found")
    enforce(
        identity,
        can_access_service(
            identity,
            Action.UPDATE,
            ServiceFacts(shop_owner_id=str(service.shop.owner_id)),
        ),
    )

    old_values = {}
    for field, value in _changes(payload, NULLABLE_SERVICE_FIELDS).items():
        if getattr(service, field) != value:
            old_values[field] = getattr(service, field)
            setattr(service, field, value)
    if not old_values:
        return service

    # Existing orders keep their snapshotted price
    await log_audit(
        db,
        AuditEntityType.SERVICE,
        service.id,
        "updated",
        identity.user_id,
        old_value=audit_snapshot(old_values),
        new_value=audit_snapshot({field: getattr(service, field) for field in old_values}),
    )
    await db.commit()
    await db.refresh(service)
    return service
