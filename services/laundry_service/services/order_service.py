"""Order operations: checkout, role-scoped queries, and lifecycle updates."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.auth.models import AuthUser, UserRole
from libs.auth.policies import (
    Action,
    OrderFacts,
    can_access_order,
    enforce,
    is_order_customer_only,
)
from libs.common.datetime_utils import ensure_utc
from libs.common.error_handler import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from libs.common.logging import get_logger
from services.laundry_service.models import (
    AuditEntityType,
    Order,
    OrderItem,
    OrderStatus,
    Service,
    Shop,
    User,
)
from services.laundry_service.order_lifecycle import (
    can_customer_transition,
    can_transition,
)
from services.laundry_service.schemas import OrderCreate, OrderUpdate
from services.laundry_service.services._helpers import (
    audit_snapshot,
    log_audit,
    to_money,
    user_uuid,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


async def load_order(db: AsyncSession, order_id: uuid.UUID) -> Order:
    """Fetch an order with items, customer and shop, or raise NotFoundError."""
    query = (
        select(Order)
        .where(Order.id == order_id)
        .options(
            selectinload(Order.items),
            selectinload(Order.customer),
            selectinload(Order.shop),
        )
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order not found")
    return order


def order_facts(order: Order) -> OrderFacts:
    return OrderFacts(
        customer_id=str(order.customer_id),
        shop_owner_id=str(order.shop.owner_id) if order.shop else None,
    )


def _check_schedule(pickup_time: datetime, delivery_time: datetime) -> None:
    if ensure_utc(delivery_time) < ensure_utc(pickup_time):
        raise ValidationError(
            "Delivery time cannot be before pickup time", field="deliveryTime"
        )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


async def create_order(
    db: AsyncSession, identity: Optional[AuthUser], payload: OrderCreate
) -> Order:
    """Turn a cart into an order with snapshotted line items.

    The order and its items are committed together; any failure before the
    commit leaves nothing persisted.
    """
    enforce(
        identity,
        can_access_order(identity, Action.CREATE),
        "Only customers can place orders",
    )
    customer_id = user_uuid(identity)

    if not payload.items:
        raise ValidationError("Cart is empty", field="items")

    customer = await db.get(User, customer_id)
    if not customer:
        raise AuthenticationError("Account no longer exists")

    shop = await db.get(Shop, payload.shop_id)
    if not shop:
        raise NotFoundError("Shop not found")
    if not shop.is_approved:
        raise ValidationError("Shop is not accepting orders", field="shopId")

    _check_schedule(payload.pickup_time, payload.delivery_time)

    service_ids = {line.service_id for line in payload.items}
    result = await db.execute(
        select(Service).where(Service.id.in_(service_ids), Service.shop_id == shop.id)
    )
    services = {service.id: service for service in result.scalars().all()}

    items = []
    total = Decimal("0")
    for index, line in enumerate(payload.items):
        if line.quantity <= 0:
            raise ValidationError(
                "Quantity must be at least 1", field=f"items.{index}.quantity"
            )
        service = services.get(line.service_id)
        if not service:
            raise ValidationError(
                "Service is not offered by this shop",
                field=f"items.{index}.serviceId",
            )
        # Cart prices are checked, not trusted
        if line.price != service.price:
            raise ValidationError(
                f"Price of {service.name} is now {service.price}",
                field=f"items.{index}.price",
            )
        item = OrderItem(
            service_id=service.id,
            service_name=service.name,
            quantity=line.quantity,
            price=service.price,
        )
        items.append(item)
        total += item.line_total

    order = Order(
        customer_id=customer.id,
        shop_id=shop.id,
        total=to_money(total),
        status=OrderStatus.PENDING,
        pickup_time=payload.pickup_time,
        delivery_time=payload.delivery_time,
        items=items,
    )
    db.add(order)
    await db.flush()

    await log_audit(
        db,
        AuditEntityType.ORDER,
        order.id,
        "created",
        identity.user_id,
        new_value=audit_snapshot(
            {"shop_id": shop.id, "total": order.total, "items": len(items)}
        ),
    )
    await db.commit()

    logger.info(
        "Order %s created by customer %s at shop %s (total=%s, items=%d)",
        order.id,
        customer.id,
        shop.id,
        order.total,
        len(items),
    )
    return await load_order(db, order.id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_orders(
    db: AsyncSession, identity: AuthUser, status: Optional[OrderStatus] = None
) -> list[Order]:
    """Orders visible to the caller: their own, their shop's, or all for admins."""
    query = (
        select(Order)
        .options(
            selectinload(Order.items),
            selectinload(Order.customer),
            selectinload(Order.shop),
        )
        .order_by(Order.created_at.desc())
    )

    if identity.role == UserRole.CUSTOMER:
        query = query.where(Order.customer_id == user_uuid(identity))
    elif identity.role == UserRole.SHOP_OWNER:
        query = query.join(Shop, Order.shop_id == Shop.id).where(
            Shop.owner_id == user_uuid(identity)
        )
    elif not identity.is_admin:
        raise AuthorizationError()

    if status:
        query = query.where(Order.status == status)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_order(
    db: AsyncSession, order_id: uuid.UUID, identity: Optional[AuthUser]
) -> Order:
    order = await load_order(db, order_id)
    enforce(identity, can_access_order(identity, Action.READ, order_facts(order)))
    return order


# ---------------------------------------------------------------------------
# Lifecycle updates
# ---------------------------------------------------------------------------


async def update_order(
    db: AsyncSession,
    order_id: uuid.UUID,
    identity: Optional[AuthUser],
    payload: OrderUpdate,
) -> Order:
    """Apply a partial update (status, pickup time, delivery time).

    Only fields present in the payload are written, in a single UPDATE
    guarded by the order's version counter.
    """
    order = await load_order(db, order_id)
    facts = order_facts(order)
    enforce(identity, can_access_order(identity, Action.UPDATE, facts))

    if payload.version is not None and payload.version != order.version:
        raise ConflictError(
            f"Order was modified (version {order.version}); reload and retry"
        )

    requested = payload.model_dump(exclude_none=True, exclude={"version"})

    target_status = requested.get("status")
    if target_status is not None:
        if is_order_customer_only(identity, facts):
            if not can_customer_transition(order.status, target_status):
                raise AuthorizationError(
                    "Customers can only cancel orders that are pending or accepted"
                )
        elif not can_transition(order.status, target_status):
            raise ValidationError(
                f"Cannot move order from {order.status.value} to {target_status.value}",
                field="status",
            )

    if "pickup_time" in requested or "delivery_time" in requested:
        _check_schedule(
            requested.get("pickup_time", order.pickup_time),
            requested.get("delivery_time", order.delivery_time),
        )

    old_values, new_values = {}, {}
    for field, value in requested.items():
        current = getattr(order, field)
        if isinstance(value, datetime):
            unchanged = ensure_utc(current) == value
        else:
            unchanged = current == value
        if unchanged:
            continue
        old_values[field] = current
        new_values[field] = value
        setattr(order, field, value)

    if not new_values:
        return order

    await log_audit(
        db,
        AuditEntityType.ORDER,
        order.id,
        "updated",
        identity.user_id,
        old_value=audit_snapshot(old_values),
        new_value=audit_snapshot(new_values),
    )
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise ConflictError("Order was modified concurrently; reload and retry")

    logger.info(
        "Order %s updated by %s (%s): %s",
        order.id,
        identity.user_id,
        identity.role.value,
        ", ".join(sorted(new_values)),
    )
    return await load_order(db, order.id)
