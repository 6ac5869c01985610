"""Shared fixtures: in-memory SQLite database, fixed clock, API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("AUTO_CHECKOUT_SCHEDULER", "none")
os.environ.setdefault("HOTEL_TIMEZONE", "Asia/Kolkata")

import uuid
from datetime import datetime

import httpx
import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.deps import get_current_admin, get_db, get_now
from app.database import Base
from app.main import app as fastapi_app
from app.models.user import User
from app.services.booking_service import BookingLifecycleService
from tests.factories import booking_request, local


@pytest.fixture
def now() -> datetime:
    """Booking window clock: a few days before the default stay."""
    return local(2025, 5, 20, 10, 0)


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def service() -> BookingLifecycleService:
    return BookingLifecycleService(strict=False)


@pytest.fixture
def strict_service() -> BookingLifecycleService:
    return BookingLifecycleService(strict=True)


@pytest.fixture
async def booking(db, service, now):
    """A pending Deluxe Room booking for 2025-06-01 to 2025-06-03."""
    return await service.create_booking(db, booking_request(), now)


@pytest.fixture
def admin_user() -> User:
    return User(
        id=uuid.uuid4(),
        email="admin@hotelortus.com",
        name="Hotel Admin",
        password_hash="not-used",
        role="admin",
        is_active=True,
    )


@pytest.fixture
def clock(now):
    """Mutable clock for API tests; set ``clock['now']`` to move time."""
    return {"now": now}


@pytest.fixture
def api_app(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(api_app):
    """Unauthenticated client."""
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def admin_client(api_app, admin_user, clock):
    """Client acting as an admin, with the request clock pinned."""
    api_app.dependency_overrides[get_current_admin] = lambda: admin_user
    api_app.dependency_overrides[get_now] = lambda: clock["now"]
    transport = httpx.ASGITransport(app=api_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
