"""Auto-checkout sweep and its scheduler loop."""

import asyncio
from datetime import date

from app.core import background_tasks
from app.core.background_tasks import (
    run_auto_checkout_sweep,
    start_auto_checkout_scheduler,
    stop_auto_checkout_scheduler,
)
from app.core.exceptions import PersistenceFailure
from app.models.booking import Booking
from app.services.booking_service import BookingLifecycleService
from tests.factories import booking_request, local


async def in_house_booking(db, service, now, **overrides):
    """Create a booking, record the arrival on check-in day and commit."""
    booking = await service.create_booking(db, booking_request(**overrides), now)
    await service.record_arrival(db, booking.id, local(2025, 6, 1, 12, 0))
    await db.commit()
    return booking.id


async def reload(session_factory, booking_id) -> Booking:
    async with session_factory() as session:
        return await session.get(Booking, booking_id)


class TestSweep:
    async def test_overdue_stay_is_completed_with_audit_note(
        self, db, service, session_factory, now
    ):
        booking_id = await in_house_booking(db, service, now)

        count = await run_auto_checkout_sweep(session_factory, now=local(2025, 6, 4, 9, 0))

        assert count == 1
        booking = await reload(session_factory, booking_id)
        assert booking.status == "completed"
        assert booking.actual_check_out is not None
        assert "[Auto-checkout at 04/06/2025, 09:00:00 AM]" in booking.admin_notes

    async def test_existing_notes_are_kept(self, db, service, session_factory, now):
        booking_id = await in_house_booking(db, service, now)
        await service.set_status(db, booking_id, "confirmed", admin_notes="Late flight")
        await db.commit()

        await run_auto_checkout_sweep(session_factory, now=local(2025, 6, 3, 11, 0))

        booking = await reload(session_factory, booking_id)
        assert booking.admin_notes.startswith("Late flight\n[Auto-checkout at 03/06/2025")

    async def test_stay_before_deadline_is_untouched(self, db, service, session_factory, now):
        booking_id = await in_house_booking(db, service, now)

        count = await run_auto_checkout_sweep(session_factory, now=local(2025, 6, 3, 10, 59))

        assert count == 0
        booking = await reload(session_factory, booking_id)
        assert booking.status == "confirmed"
        assert booking.actual_check_out is None

    async def test_deadline_follows_extension(self, db, service, session_factory, now):
        booking_id = await in_house_booking(db, service, now)
        await service.extend_stay(db, booking_id)
        await db.commit()

        assert await run_auto_checkout_sweep(session_factory, now=local(2025, 6, 3, 12, 0)) == 0
        assert await run_auto_checkout_sweep(session_factory, now=local(2025, 6, 4, 11, 0)) == 1

    async def test_guests_not_in_house_are_ignored(self, db, service, session_factory, now):
        never_arrived = await service.create_booking(db, booking_request(), now)
        departed = await in_house_booking(db, service, now)
        await service.record_departure(db, departed, local(2025, 6, 2, 9, 0))
        await db.commit()

        count = await run_auto_checkout_sweep(session_factory, now=local(2025, 6, 5, 12, 0))

        assert count == 0
        assert (await reload(session_factory, never_arrived.id)).status == "pending"

    async def test_cancelled_booking_is_not_swept(self, db, service, session_factory, now):
        booking_id = await in_house_booking(db, service, now)
        await service.set_status(db, booking_id, "cancelled")
        await db.commit()

        count = await run_auto_checkout_sweep(session_factory, now=local(2025, 6, 5, 12, 0))

        assert count == 0
        booking = await reload(session_factory, booking_id)
        assert booking.status == "cancelled"
        assert booking.actual_check_out is None

    async def test_one_failure_does_not_stop_the_sweep(
        self, db, service, session_factory, now, monkeypatch
    ):
        failing_id = await in_house_booking(db, service, now)
        healthy_id = await in_house_booking(
            db, service, now, name="Rohan Iyer", check_out=date(2025, 6, 2)
        )
        original = BookingLifecycleService.complete_overdue_stay

        async def flaky(self, db, booking_id, now=None):
            if booking_id == failing_id:
                raise PersistenceFailure("auto-checkout booking")
            return await original(self, db, booking_id, now)

        monkeypatch.setattr(BookingLifecycleService, "complete_overdue_stay", flaky)

        sweep_time = local(2025, 6, 4, 9, 0)
        assert await run_auto_checkout_sweep(session_factory, now=sweep_time) == 1
        assert (await reload(session_factory, healthy_id)).status == "completed"
        assert (await reload(session_factory, failing_id)).actual_check_out is None

        # The next pass picks up the booking that failed
        monkeypatch.undo()
        assert await run_auto_checkout_sweep(session_factory, now=sweep_time) == 1
        assert (await reload(session_factory, failing_id)).status == "completed"

    async def test_second_pass_is_a_no_op(self, db, service, session_factory, now):
        await in_house_booking(db, service, now)
        sweep_time = local(2025, 6, 4, 9, 0)

        assert await run_auto_checkout_sweep(session_factory, now=sweep_time) == 1
        assert await run_auto_checkout_sweep(session_factory, now=sweep_time) == 0

    async def test_guard_skips_stay_closed_after_the_scan(self, db, service, now):
        booking = await service.create_booking(db, booking_request(), now)
        await service.record_arrival(db, booking.id, local(2025, 6, 1, 12, 0))
        await service.record_departure(db, booking.id, local(2025, 6, 3, 10, 0))

        updated = await service.complete_overdue_stay(db, booking.id, local(2025, 6, 4, 9, 0))

        assert updated is False

    async def test_guard_skips_stay_cancelled_after_the_scan(
        self, db, service, session_factory, now
    ):
        booking_id = await in_house_booking(db, service, now)
        sweep_time = local(2025, 6, 4, 9, 0)
        assert [b.id for b in await service.find_overdue_stays(db, sweep_time)] == [booking_id]

        await service.set_status(db, booking_id, "cancelled")
        await db.commit()
        updated = await service.complete_overdue_stay(db, booking_id, sweep_time)
        await db.commit()

        assert updated is False
        booking = await reload(session_factory, booking_id)
        assert booking.status == "cancelled"
        assert booking.actual_check_out is None
        assert "Auto-checkout" not in booking.admin_notes


class TestScheduler:
    async def test_keeps_running_after_a_failed_pass(self, monkeypatch):
        calls = []

        async def fake_sweep(session_factory, now=None):
            calls.append(now)
            if len(calls) == 1:
                raise RuntimeError("database unavailable")
            if len(calls) == 3:
                stop_auto_checkout_scheduler()
            return 0

        monkeypatch.setattr(background_tasks, "run_auto_checkout_sweep", fake_sweep)

        await asyncio.wait_for(
            start_auto_checkout_scheduler(session_factory=None, interval_seconds=0.01),
            timeout=5,
        )

        assert len(calls) == 3
