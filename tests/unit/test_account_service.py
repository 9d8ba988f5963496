"""Unit tests for account_service: registration, login, role changes."""

import pytest
from libs.common.error_handler import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from services.laundry_service.models import AuditLog, UserRole
from services.laundry_service.schemas import RegisterRequest, UserRoleUpdate
from services.laundry_service.services import account_service
from sqlalchemy import select
from tests.factories import UserFactory, identity_for


def _registration(**overrides) -> RegisterRequest:
    data = {
        "email": "Ada@Example.com",
        "password": "correct-horse",
        "name": "Ada",
    }
    data.update(overrides)
    return RegisterRequest(**data)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_then_authenticate(db_session):
    user = await account_service.register_user(db_session, _registration())

    assert user.email == "ada@example.com"
    assert user.role == UserRole.CUSTOMER
    assert user.password_hash != "correct-horse"

    authed = await account_service.authenticate(
        db_session, "ADA@example.com", "correct-horse"
    )
    assert authed.id == user.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_wrong_password_and_unknown_email_look_the_same(db_session):
    await account_service.register_user(db_session, _registration())

    with pytest.raises(AuthenticationError) as wrong_password:
        await account_service.authenticate(db_session, "ada@example.com", "nope-nope")
    with pytest.raises(AuthenticationError) as unknown_email:
        await account_service.authenticate(db_session, "bob@example.com", "nope-nope")

    assert wrong_password.value.message == unknown_email.value.message


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_duplicate_email_conflicts(db_session):
    await account_service.register_user(db_session, _registration())

    with pytest.raises(ConflictError):
        await account_service.register_user(
            db_session, _registration(email="ada@example.com")
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_admin_is_rejected(db_session):
    with pytest.raises(ValidationError) as exc_info:
        await account_service.register_user(
            db_session, _registration(role=UserRole.ADMIN)
        )

    assert exc_info.value.field == "role"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_shop_owner(db_session):
    user = await account_service.register_user(
        db_session, _registration(role="SHOP_OWNER")
    )

    assert user.role == UserRole.SHOP_OWNER


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_changes_role_with_audit(db_session, admin, customer):
    updated = await account_service.change_user_role(
        db_session,
        customer.id,
        identity_for(admin),
        UserRoleUpdate(role=UserRole.SHOP_OWNER),
    )

    assert updated.role == UserRole.SHOP_OWNER
    result = await db_session.execute(
        select(AuditLog).where(AuditLog.entity_id == customer.id)
    )
    entry = result.scalar_one()
    assert entry.action == "role_changed"
    assert entry.old_value == {"role": "customer"}
    assert entry.new_value == {"role": "shop_owner"}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_cannot_change_own_role(db_session, admin):
    with pytest.raises(ValidationError):
        await account_service.change_user_role(
            db_session,
            admin.id,
            identity_for(admin),
            UserRoleUpdate(role=UserRole.CUSTOMER),
        )


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("new_role", [UserRole.CUSTOMER, UserRole.ADMIN])
async def test_shop_owner_with_a_shop_keeps_role(
    db_session, admin, shop_owner, shop, new_role
):
    with pytest.raises(ValidationError) as exc_info:
        await account_service.change_user_role(
            db_session,
            shop_owner.id,
            identity_for(admin),
            UserRoleUpdate(role=new_role),
        )

    assert exc_info.value.field == "role"
    await db_session.refresh(shop_owner)
    assert shop_owner.role == UserRole.SHOP_OWNER
    audit = await db_session.execute(
        select(AuditLog).where(AuditLog.entity_id == shop_owner.id)
    )
    assert audit.scalars().all() == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_shop_owner_without_a_shop_can_be_demoted(db_session, admin, shop_owner):
    updated = await account_service.change_user_role(
        db_session,
        shop_owner.id,
        identity_for(admin),
        UserRoleUpdate(role=UserRole.CUSTOMER),
    )

    assert updated.role == UserRole.CUSTOMER


@pytest.mark.asyncio
@pytest.mark.unit
async def test_change_role_unknown_user(db_session, admin):
    missing = UserFactory.create()

    with pytest.raises(NotFoundError):
        await account_service.change_user_role(
            db_session,
            missing.id,
            identity_for(admin),
            UserRoleUpdate(role=UserRole.ADMIN),
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_stats(db_session, admin, customer, shop_owner, shop):
    stats = await account_service.get_admin_stats(db_session)

    assert stats.total_users == 3
    assert stats.total_shops == 1
    assert stats.pending_shops == 0
    assert stats.total_orders == 0
