"""Booking lifecycle service.

Owns every mutation of a booking: status, payment sub-ledger, physical
arrival/departure, stay extension and the archive flag. Each command is a
single read-modify-write of one booking and returns the updated booking with
a human-readable message. Commands flush but never commit; the caller owns
the transaction.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from decimal import Decimal
from math import ceil
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    NotCheckedInYet,
    NotFoundError,
    PersistenceFailure,
    ValidationError,
)
from app.domain.booking_state import (
    BOOKING_STATUSES,
    SWEEPABLE_STATUSES,
    assert_booking_transition,
    assert_not_cancelled,
    validate_booking_status,
)
from app.domain.payment_state import (
    COLLECTED_PAYMENT_STATUSES,
    PAYMENT_STATUSES,
    underpayment_warning,
    validate_amount,
    validate_payment_status,
)
from app.domain.stay_policy import (
    RoomType,
    as_utc,
    format_local,
    is_stay_overdue,
    local_day_bounds,
    local_today,
    nightly_price,
    suggested_payment_amount,
)
from app.models.booking import Booking
from app.schemas.booking import BookingCreate

logger = logging.getLogger(__name__)


@contextmanager
def persistence_guard(operation: str) -> Iterator[None]:
    """Translate database errors into PersistenceFailure."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Persistence failure while trying to {operation}: {e}")
        raise PersistenceFailure(operation) from e


class BookingLifecycleService:
    """Service for the booking lifecycle and its reporting views."""

    def __init__(self, strict: bool | None = None) -> None:
        self.strict = settings.strict_status_transitions if strict is None else strict

    # ==================== CREATION & READS ====================

    async def create_booking(
        self,
        db: AsyncSession,
        data: BookingCreate,
        now: datetime | None = None,
    ) -> Booking:
        """Create a pending, unpaid booking from a public request."""
        now = as_utc(now)

        if data.check_in < local_today(now):
            raise ValidationError("Check-in date cannot be in the past")
        if data.check_out <= data.check_in:
            raise ValidationError("Check-out date must be after check-in date")

        booking = Booking(
            name=data.name,
            email=str(data.email).lower(),
            phone=data.phone,
            room_type=RoomType(data.room_type).value,
            check_in=data.check_in,
            check_out=data.check_out,
            guests=data.guests,
            special_requests=data.special_requests,
            status="pending",
            payment_status="unpaid",
            payment_amount=Decimal("0"),
            paid_amount=Decimal("0"),
            extended_by=0,
            is_archived=False,
            created_at=now,
            updated_at=now,
        )
        db.add(booking)
        with persistence_guard("save booking"):
            await db.flush()

        logger.info(
            f"Booking {booking.id} created: {booking.room_type}, "
            f"{booking.check_in} to {booking.check_out}"
        )
        return booking

    async def get_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        """Get a booking by ID."""
        with persistence_guard("load booking"):
            result = await db.execute(select(Booking).where(Booking.id == booking_id))
            booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        status: str | None = None,
        archived: bool = False,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[Booking], int]:
        """List bookings for the admin views.

        The default view hides archived bookings and shows newest first; the
        archived view is ordered by when a booking was last touched.
        """
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive")

        query = select(Booking).where(Booking.is_archived.is_(archived))
        if status and status != "all":
            query = query.where(Booking.status == validate_booking_status(status))

        order = Booking.updated_at.desc() if archived else Booking.created_at.desc()

        with persistence_guard("list bookings"):
            count_result = await db.execute(
                select(func.count()).select_from(query.subquery())
            )
            total = count_result.scalar() or 0

            offset = (page - 1) * page_size
            result = await db.execute(query.order_by(order).offset(offset).limit(page_size))
            bookings = list(result.scalars().all())

        return bookings, total

    async def delete_booking(self, db: AsyncSession, booking_id: UUID) -> str:
        """Hard-delete a booking. No lifecycle rules apply."""
        booking = await self.get_booking(db, booking_id)
        with persistence_guard("delete booking"):
            await db.delete(booking)
            await db.flush()
        logger.info(f"Booking {booking_id} deleted")
        return "Booking deleted successfully"

    # ==================== STATUS ====================

    async def set_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        new_status: str,
        admin_notes: str | None = None,
        now: datetime | None = None,
    ) -> tuple[Booking, str]:
        """Overwrite the booking status.

        Any enum value is accepted from any current status unless the service
        runs in strict mode.
        """
        validate_booking_status(new_status)
        booking = await self.get_booking(db, booking_id)

        if self.strict:
            assert_booking_transition(booking.status, new_status)

        booking.status = new_status
        if admin_notes is not None:
            booking.admin_notes = admin_notes
        await self._touch(db, booking, now, "update booking status")

        return booking, f"Booking status updated to {new_status}"

    # ==================== PAYMENT ====================

    async def set_payment(
        self,
        db: AsyncSession,
        booking_id: UUID,
        payment_status: str,
        payment_amount: Decimal | int | float | None = None,
        paid_amount: Decimal | int | float | None = None,
        now: datetime | None = None,
    ) -> tuple[Booking, str]:
        """Record payment details; a full payment auto-confirms the booking."""
        validate_payment_status(payment_status)
        amount_due = validate_amount("payment_amount", payment_amount)
        amount_paid = validate_amount("paid_amount", paid_amount)
        now = as_utc(now)

        booking = await self.get_booking(db, booking_id)

        if self.strict and payment_status == "paid":
            self._assert_can_confirm(booking, "mark payment on")

        booking.payment_status = payment_status
        booking.payment_amount = amount_due
        booking.paid_amount = amount_paid

        if payment_status == "paid":
            booking.paid_at = now
            booking.status = "confirmed"
            message = "Payment confirmed! Booking auto-confirmed."
        else:
            message = f"Payment status updated to {payment_status}"

        warning = underpayment_warning(payment_status, amount_due, amount_paid)
        if warning:
            logger.warning(f"Booking {booking_id}: {warning}")
            message = f"{message} Warning: {warning}."

        await self._touch(db, booking, now, "update payment")
        return booking, message

    # ==================== PRESENCE ====================

    async def record_arrival(
        self,
        db: AsyncSession,
        booking_id: UUID,
        now: datetime | None = None,
    ) -> tuple[Booking, str]:
        """Record the guest's physical arrival. Allowed once."""
        now = as_utc(now)
        booking = await self.get_booking(db, booking_id)

        if booking.actual_check_in is not None:
            raise AlreadyCheckedIn()
        if self.strict:
            self._assert_can_confirm(booking, "check in")

        booking.actual_check_in = now
        booking.status = "confirmed"
        await self._touch(db, booking, now, "record check-in")

        return booking, f"Guest checked in at {format_local(now)}"

    async def record_departure(
        self,
        db: AsyncSession,
        booking_id: UUID,
        now: datetime | None = None,
    ) -> tuple[Booking, str]:
        """Record the guest's departure and complete the booking."""
        now = as_utc(now)
        booking = await self.get_booking(db, booking_id)
        self._require_in_house(booking)

        booking.actual_check_out = now
        booking.status = "completed"
        await self._touch(db, booking, now, "record check-out")

        return booking, f"Guest checked out at {format_local(now)}"

    # ==================== EXTENSION & ARCHIVE ====================

    async def extend_stay(
        self,
        db: AsyncSession,
        booking_id: UUID,
        now: datetime | None = None,
    ) -> tuple[Booking, str]:
        """Push the reserved check-out back by one day for an in-house guest."""
        booking = await self.get_booking(db, booking_id)
        self._require_in_house(booking)

        if booking.original_check_out is None:
            booking.original_check_out = booking.check_out
        booking.check_out = booking.check_out + timedelta(days=1)
        booking.extended_by = (booking.extended_by or 0) + 1
        await self._touch(db, booking, now, "extend booking")

        return booking, f"Stay extended by 1 day. New checkout: {booking.check_out:%d/%m/%Y}"

    async def archive(
        self, db: AsyncSession, booking_id: UUID, now: datetime | None = None
    ) -> tuple[Booking, str]:
        return await self._set_archived(db, booking_id, True, now)

    async def unarchive(
        self, db: AsyncSession, booking_id: UUID, now: datetime | None = None
    ) -> tuple[Booking, str]:
        return await self._set_archived(db, booking_id, False, now)

    async def _set_archived(
        self, db: AsyncSession, booking_id: UUID, archived: bool, now: datetime | None
    ) -> tuple[Booking, str]:
        booking = await self.get_booking(db, booking_id)
        booking.is_archived = archived
        await self._touch(db, booking, now, "archive booking")
        action = "archived" if archived else "unarchived"
        return booking, f"Booking {action} successfully"

    # ==================== AUTO-CHECKOUT ====================

    async def find_overdue_stays(
        self, db: AsyncSession, now: datetime | None = None
    ) -> list[Booking]:
        """In-house bookings whose check-out deadline has passed."""
        now = as_utc(now)
        with persistence_guard("query in-house bookings"):
            result = await db.execute(
                select(Booking).where(
                    Booking.actual_check_in.is_not(None),
                    Booking.actual_check_out.is_(None),
                    Booking.status.in_(SWEEPABLE_STATUSES),
                )
            )
            in_house = list(result.scalars().all())
        return [b for b in in_house if is_stay_overdue(b.check_out, now)]

    async def complete_overdue_stay(
        self, db: AsyncSession, booking_id: UUID, now: datetime | None = None
    ) -> bool:
        """Force the departure of one overdue stay.

        Returns False when the guest was checked out or the booking was
        cancelled in the meantime.
        """
        now = as_utc(now)
        note = f"\n[Auto-checkout at {format_local(now)}]"
        with persistence_guard("auto-checkout booking"):
            result = await db.execute(
                update(Booking)
                .where(
                    Booking.id == booking_id,
                    Booking.actual_check_out.is_(None),
                    Booking.status.in_(SWEEPABLE_STATUSES),
                )
                .values(
                    actual_check_out=now,
                    status="completed",
                    admin_notes=func.coalesce(Booking.admin_notes, "") + note,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )
        return result.rowcount > 0

    # ==================== REPORTING ====================

    async def booking_stats(self, db: AsyncSession, now: datetime | None = None) -> dict:
        """Counts per status, bookings created today and overall total."""
        day_start, day_end = local_day_bounds(as_utc(now))
        with persistence_guard("compute booking statistics"):
            result = await db.execute(
                select(Booking.status, func.count()).group_by(Booking.status)
            )
            by_status = {status: count for status, count in result.all()}

            today_result = await db.execute(
                select(func.count()).where(
                    Booking.created_at >= day_start, Booking.created_at < day_end
                )
            )
            today = today_result.scalar() or 0

        stats = {status: by_status.get(status, 0) for status in BOOKING_STATUSES}
        stats["today"] = today
        stats["total"] = sum(by_status.values())
        return stats

    async def payment_stats(self, db: AsyncSession, now: datetime | None = None) -> dict:
        """Collections for today and overall, plus counts per payment status."""
        day_start, day_end = local_day_bounds(as_utc(now))
        with persistence_guard("compute payment statistics"):
            today_result = await db.execute(
                select(func.coalesce(func.sum(Booking.paid_amount), 0)).where(
                    Booking.paid_at >= day_start,
                    Booking.paid_at < day_end,
                    Booking.payment_status.in_(COLLECTED_PAYMENT_STATUSES),
                )
            )
            revenue_result = await db.execute(
                select(func.coalesce(func.sum(Booking.paid_amount), 0)).where(
                    Booking.payment_status.in_(COLLECTED_PAYMENT_STATUSES)
                )
            )
            counts_result = await db.execute(
                select(Booking.payment_status, func.count()).group_by(Booking.payment_status)
            )
            counts = {status: count for status, count in counts_result.all()}

        return {
            "today_collection": Decimal(str(today_result.scalar() or 0)),
            "total_revenue": Decimal(str(revenue_result.scalar() or 0)),
            **{f"{status}_count": counts.get(status, 0) for status in PAYMENT_STATUSES},
        }

    async def payment_suggestion(self, db: AsyncSession, booking_id: UUID) -> dict:
        """Default amounts for the payment form, based on the room price table."""
        booking = await self.get_booking(db, booking_id)
        return {
            "room_type": booking.room_type,
            "nights": booking.nights,
            "nightly_rate": nightly_price(booking.room_type),
            "suggested_amount": suggested_payment_amount(
                booking.room_type, booking.nights, booking.payment_amount
            ),
            "paid_amount": booking.paid_amount or Decimal("0"),
            "payment_status": booking.payment_status,
        }

    # ==================== HELPERS ====================

    @staticmethod
    def _assert_can_confirm(booking: Booking, action: str) -> None:
        """Strict mode: the implicit move to confirmed must be a legal transition."""
        if booking.status == "confirmed":
            return
        assert_not_cancelled(booking.status, action)
        assert_booking_transition(booking.status, "confirmed")

    @staticmethod
    def _require_in_house(booking: Booking) -> None:
        if booking.is_in_house:
            return
        if booking.actual_check_in is None:
            raise NotCheckedInYet()
        raise AlreadyCheckedOut()

    @staticmethod
    async def _touch(
        db: AsyncSession, booking: Booking, now: datetime | None, operation: str
    ) -> None:
        booking.updated_at = as_utc(now)
        with persistence_guard(operation):
            await db.flush()


def total_pages(total: int, page_size: int) -> int:
    return ceil(total / page_size) if page_size else 0


booking_service = BookingLifecycleService()
