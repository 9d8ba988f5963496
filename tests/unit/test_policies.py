"""Unit tests for the authorization guard.

Pure predicates over identities and ownership facts; no database.
"""

import uuid

import pytest
from libs.auth.models import AuthUser, UserRole
from libs.auth.policies import (
    Action,
    OrderFacts,
    ServiceFacts,
    ShopFacts,
    can_access_order,
    can_access_service,
    can_access_shop,
    can_change_shop_approval,
    can_change_user_role,
    enforce,
    is_order_customer_only,
)
from libs.common.error_handler import AuthenticationError, AuthorizationError


def _identity(role: UserRole, user_id: str = None) -> AuthUser:
    return AuthUser(user_id=user_id or str(uuid.uuid4()), role=role)


CUSTOMER = _identity(UserRole.CUSTOMER)
OWNER = _identity(UserRole.SHOP_OWNER)
ADMIN = _identity(UserRole.ADMIN)
OTHER_CUSTOMER = _identity(UserRole.CUSTOMER)
OTHER_OWNER = _identity(UserRole.SHOP_OWNER)

ORDER = OrderFacts(customer_id=CUSTOMER.user_id, shop_owner_id=OWNER.user_id)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("action", [Action.READ, Action.UPDATE])
def test_order_parties_are_allowed(action):
    assert can_access_order(CUSTOMER, action, ORDER)
    assert can_access_order(OWNER, action, ORDER)
    assert can_access_order(ADMIN, action, ORDER)


@pytest.mark.unit
@pytest.mark.parametrize("action", [Action.READ, Action.UPDATE])
def test_order_strangers_are_denied(action):
    assert not can_access_order(OTHER_CUSTOMER, action, ORDER)
    assert not can_access_order(OTHER_OWNER, action, ORDER)


@pytest.mark.unit
def test_order_denied_without_identity_or_facts():
    assert not can_access_order(None, Action.READ, ORDER)
    assert not can_access_order(CUSTOMER, Action.READ, None)


@pytest.mark.unit
def test_order_unknown_action_fails_closed():
    assert not can_access_order(ADMIN, Action.DELETE, ORDER)


@pytest.mark.unit
def test_only_customers_create_orders():
    assert can_access_order(CUSTOMER, Action.CREATE)
    assert not can_access_order(OWNER, Action.CREATE)
    assert not can_access_order(ADMIN, Action.CREATE)


@pytest.mark.unit
def test_customer_only_claim():
    assert is_order_customer_only(CUSTOMER, ORDER)
    assert not is_order_customer_only(OWNER, ORDER)
    assert not is_order_customer_only(ADMIN, ORDER)


@pytest.mark.unit
def test_order_facts_with_missing_owner_still_deny_strangers():
    facts = OrderFacts(customer_id=CUSTOMER.user_id, shop_owner_id=None)
    assert not can_access_order(OTHER_OWNER, Action.READ, facts)
    assert can_access_order(CUSTOMER, Action.READ, facts)


# ---------------------------------------------------------------------------
# Shops and services
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_unapproved_shop_visible_to_owner_and_admin_only():
    facts = ShopFacts(owner_id=OWNER.user_id, is_approved=False)
    assert can_access_shop(OWNER, Action.READ, facts)
    assert can_access_shop(ADMIN, Action.READ, facts)
    assert not can_access_shop(CUSTOMER, Action.READ, facts)
    assert not can_access_shop(OTHER_OWNER, Action.READ, facts)


@pytest.mark.unit
def test_approved_shop_visible_to_everyone_signed_in():
    facts = ShopFacts(owner_id=OWNER.user_id, is_approved=True)
    assert can_access_shop(CUSTOMER, Action.READ, facts)
    assert not can_access_shop(None, Action.READ, facts)


@pytest.mark.unit
def test_shop_update_and_approval():
    facts = ShopFacts(owner_id=OWNER.user_id, is_approved=True)
    assert can_access_shop(OWNER, Action.UPDATE, facts)
    assert can_access_shop(ADMIN, Action.UPDATE, facts)
    assert not can_access_shop(OTHER_OWNER, Action.UPDATE, facts)
    assert not can_access_shop(CUSTOMER, Action.UPDATE, facts)

    assert can_change_shop_approval(ADMIN)
    assert not can_change_shop_approval(OWNER)


@pytest.mark.unit
def test_only_admins_create_shops_and_change_roles():
    assert can_access_shop(ADMIN, Action.CREATE)
    assert not can_access_shop(OWNER, Action.CREATE)
    assert can_change_user_role(ADMIN)
    assert not can_change_user_role(CUSTOMER)


@pytest.mark.unit
def test_services_writable_by_owning_shop_owner_only():
    facts = ServiceFacts(shop_owner_id=OWNER.user_id)
    assert can_access_service(OWNER, Action.UPDATE, facts)
    assert can_access_service(OWNER, Action.CREATE, facts)
    assert not can_access_service(OTHER_OWNER, Action.UPDATE, facts)
    assert not can_access_service(ADMIN, Action.UPDATE, facts)
    assert can_access_service(CUSTOMER, Action.READ, facts)


# ---------------------------------------------------------------------------
# enforce
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_enforce_without_identity_is_unauthenticated():
    with pytest.raises(AuthenticationError):
        enforce(None, True)


@pytest.mark.unit
def test_enforce_denied_is_forbidden():
    with pytest.raises(AuthorizationError) as exc_info:
        enforce(CUSTOMER, False, "nope")
    assert exc_info.value.message == "nope"


@pytest.mark.unit
def test_enforce_allowed_passes():
    enforce(CUSTOMER, True)
