"""Celery entry point for the auto-checkout sweep."""

import asyncio

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.config import settings
from app.database import Base
from app.models.booking import Booking
from app.services.booking_service import BookingLifecycleService
from app.tasks import auto_checkout_overdue_stays
from tests.factories import booking_request, local


async def seed_overdue_stay(url: str):
    """Create the schema in a file database and leave one guest past checkout."""
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    service = BookingLifecycleService(strict=False)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as db:
        booking = await service.create_booking(db, booking_request(), local(2025, 5, 20, 10, 0))
        await service.record_arrival(db, booking.id, local(2025, 6, 1, 12, 0))
        await db.commit()
        booking_id = booking.id

    await engine.dispose()
    return booking_id


async def load(url: str, booking_id) -> Booking:
    engine = create_async_engine(url)
    try:
        async with async_sessionmaker(engine)() as db:
            return await db.get(Booking, booking_id)
    finally:
        await engine.dispose()


def test_task_completes_overdue_stays(tmp_path, monkeypatch):
    url = f"sqlite+aiosqlite:///{tmp_path / 'ortus.db'}"
    booking_id = asyncio.run(seed_overdue_stay(url))
    monkeypatch.setattr(settings, "database_url_override", url)

    result = auto_checkout_overdue_stays()

    assert result == {"status": "success", "completed": 1}
    booking = asyncio.run(load(url, booking_id))
    assert booking.status == "completed"
    assert "[Auto-checkout at" in booking.admin_notes

    assert auto_checkout_overdue_stays() == {"status": "success", "completed": 0}


def test_task_reports_unreachable_database(tmp_path, monkeypatch):
    missing = tmp_path / "no-such-dir" / "ortus.db"
    monkeypatch.setattr(settings, "database_url_override", f"sqlite+aiosqlite:///{missing}")

    result = auto_checkout_overdue_stays()

    assert result["status"] == "error"
    assert result["message"]
