"""Background auto-checkout sweep for overdue stays."""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings
from app.domain.stay_policy import as_utc
from app.services.booking_service import booking_service

logger = logging.getLogger(__name__)

# Flag to stop the background task
_stop_auto_checkout = False


async def run_auto_checkout_sweep(
    session_factory: async_sessionmaker[AsyncSession],
    now=None,
) -> int:
    """Complete every in-house booking whose check-out deadline has passed.

    Each booking is committed on its own; a failure is logged and rolled back
    and the sweep moves on. Returns the number of bookings completed.
    """
    now = as_utc(now)
    completed = 0

    async with session_factory() as db:
        overdue = await booking_service.find_overdue_stays(db, now)
        # Plain values only: a rollback expires loaded instances
        targets = [(b.id, b.name, b.room_type) for b in overdue]

        for booking_id, guest_name, room_type in targets:
            try:
                updated = await booking_service.complete_overdue_stay(db, booking_id, now)
                await db.commit()
            except Exception as e:
                await db.rollback()
                logger.error(f"Auto-checkout failed for booking {booking_id}: {e}")
                continue

            if updated:
                completed += 1
                logger.info(f"Auto-checkout: {guest_name} (Room: {room_type})")

    return completed


async def run_isolated_auto_checkout_sweep() -> int:
    """Run one sweep on a short-lived engine (for Celery, one event loop per task)."""
    engine = create_async_engine(settings.database_url)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    try:
        return await run_auto_checkout_sweep(session_factory)
    finally:
        await engine.dispose()


async def start_auto_checkout_scheduler(
    session_factory: async_sessionmaker[AsyncSession],
    interval_seconds: float | None = None,
) -> None:
    """Background task that sweeps for overdue stays at a fixed interval."""
    global _stop_auto_checkout
    _stop_auto_checkout = False
    interval = interval_seconds or settings.auto_checkout_interval_seconds

    logger.info(f"Auto-checkout scheduler started (every {interval}s)")

    while not _stop_auto_checkout:
        await asyncio.sleep(interval)
        if _stop_auto_checkout:
            break
        try:
            count = await run_auto_checkout_sweep(session_factory)
            if count:
                logger.info(f"Auto-checkout sweep completed {count} booking(s)")
        except Exception as e:
            logger.error(f"Auto-checkout scheduler error: {e}")

    logger.info("Auto-checkout scheduler stopped")


def stop_auto_checkout_scheduler() -> None:
    """Signal the auto-checkout scheduler to stop."""
    global _stop_auto_checkout
    _stop_auto_checkout = True
