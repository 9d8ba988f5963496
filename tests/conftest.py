from decimal import Decimal
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from libs.db.base import Base
from libs.db.session import get_async_db
from services.laundry_service import models as _laundry_models  # noqa: F401
from services.laundry_service.app.main import app
from services.laundry_service.models import UserRole
from tests.factories import ServiceFactory, ShopFactory, UserFactory


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh in-memory database per test.
    StaticPool keeps every session on the one connection that holds the data.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and calling services directly."""
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    Yield an AsyncClient with the app and overridden DB dependency.
    Each request gets its own session, like in production.
    """

    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_db] = _get_test_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Marketplace fixtures
# ---------------------------------------------------------------------------


async def _persist(db_session, *instances):
    db_session.add_all(instances)
    await db_session.commit()
    return instances[0] if len(instances) == 1 else instances


@pytest_asyncio.fixture
async def admin(db_session):
    return await _persist(
        db_session, UserFactory.create(role=UserRole.ADMIN, name="Admin")
    )


@pytest_asyncio.fixture
async def customer(db_session):
    return await _persist(
        db_session, UserFactory.create(role=UserRole.CUSTOMER, name="Ada Customer")
    )


@pytest_asyncio.fixture
async def other_customer(db_session):
    return await _persist(
        db_session, UserFactory.create(role=UserRole.CUSTOMER, name="Bayo Customer")
    )


@pytest_asyncio.fixture
async def shop_owner(db_session):
    return await _persist(
        db_session, UserFactory.create(role=UserRole.SHOP_OWNER, name="Chidi Owner")
    )


@pytest_asyncio.fixture
async def shop(db_session, shop_owner):
    """An approved shop owned by ``shop_owner``."""
    return await _persist(
        db_session, ShopFactory.create(owner_id=shop_owner.id, is_approved=True)
    )


@pytest_asyncio.fixture
async def service(db_session, shop):
    """A 12.50 service offered by ``shop``."""
    return await _persist(
        db_session,
        ServiceFactory.create(shop_id=shop.id, name="Wash", price=Decimal("12.50")),
    )
