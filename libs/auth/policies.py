"""Authorization guard.

Every handler asks this module before reading or writing a resource. Each
rule is a pure predicate over the caller's identity and the ownership facts
of the target resource; nothing here touches the database or request state.

Rules fail closed: unknown actions, missing identities and missing facts
all deny.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from libs.auth.models import AuthUser, UserRole
from libs.common.error_handler import AuthenticationError, AuthorizationError


class Action(str, enum.Enum):
    READ = "read"
    UPDATE = "update"
    CREATE = "create"
    DELETE = "delete"


@dataclass(frozen=True)
class OrderFacts:
    customer_id: Optional[str]
    shop_owner_id: Optional[str]


@dataclass(frozen=True)
class ShopFacts:
    owner_id: Optional[str]
    is_approved: bool


@dataclass(frozen=True)
class ServiceFacts:
    shop_owner_id: Optional[str]


def _is(identity: Optional[AuthUser], user_id: Optional[str]) -> bool:
    return identity is not None and user_id is not None and identity.user_id == user_id


def can_access_order(
    identity: Optional[AuthUser], action: Action, facts: Optional[OrderFacts] = None
) -> bool:
    if identity is None:
        return False
    if action == Action.CREATE:
        # Customers only ever create orders for themselves
        return identity.role == UserRole.CUSTOMER
    if action in (Action.READ, Action.UPDATE):
        if facts is None:
            return False
        return (
            identity.is_admin
            or _is(identity, facts.customer_id)
            or _is(identity, facts.shop_owner_id)
        )
    return False


def is_order_customer_only(identity: AuthUser, facts: OrderFacts) -> bool:
    """True when the caller's only claim on the order is being its customer."""
    return (
        not identity.is_admin
        and _is(identity, facts.customer_id)
        and not _is(identity, facts.shop_owner_id)
    )


def can_access_shop(
    identity: Optional[AuthUser], action: Action, facts: Optional[ShopFacts] = None
) -> bool:
    if identity is None:
        return False
    if action == Action.CREATE:
        return identity.is_admin
    if facts is None:
        return False
    if action == Action.READ:
        return facts.is_approved or identity.is_admin or _is(identity, facts.owner_id)
    if action == Action.UPDATE:
        return identity.is_admin or (
            identity.role == UserRole.SHOP_OWNER and _is(identity, facts.owner_id)
        )
    return False


def can_change_shop_approval(identity: Optional[AuthUser]) -> bool:
    return identity is not None and identity.is_admin


def can_access_service(
    identity: Optional[AuthUser], action: Action, facts: Optional[ServiceFacts] = None
) -> bool:
    if identity is None:
        return False
    if action == Action.READ:
        return True
    if action in (Action.CREATE, Action.UPDATE):
        return (
            facts is not None
            and identity.role == UserRole.SHOP_OWNER
            and _is(identity, facts.shop_owner_id)
        )
    return False


def can_change_user_role(identity: Optional[AuthUser]) -> bool:
    return identity is not None and identity.is_admin


def enforce(identity: Optional[AuthUser], allowed: bool, message: Optional[str] = None) -> None:
    """Turn a policy decision into the matching error.

    No identity is an authentication failure; an identity without the
    right is an authorization failure.
    """
    if identity is None:
        raise AuthenticationError()
    if not allowed:
        if message:
            raise AuthorizationError(message)
        raise AuthorizationError()
