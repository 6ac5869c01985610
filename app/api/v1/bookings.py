"""Booking endpoints.

Public visitors can submit a booking request; every other endpoint is admin
only and delegates to the booking lifecycle service.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_booking_service, get_current_admin, get_db, get_now
from app.core.exceptions import ArrivalNotOpen
from app.core.middleware import booking_limiter
from app.domain.stay_policy import arrival_opens_at, format_local, is_arrival_open
from app.models.booking import Booking
from app.models.user import User
from app.schemas.booking import (
    BookingActionResponse,
    BookingCreate,
    BookingListResponse,
    BookingPaymentUpdate,
    BookingResponse,
    BookingStats,
    BookingStatusUpdate,
    BookingSubmittedResponse,
    PaymentStats,
    PaymentSuggestion,
)
from app.services.booking_service import BookingLifecycleService, total_pages

router = APIRouter()

Service = Annotated[BookingLifecycleService, Depends(get_booking_service)]
Admin = Annotated[User, Depends(get_current_admin)]
Db = Annotated[AsyncSession, Depends(get_db)]
Now = Annotated[datetime, Depends(get_now)]


def _action(booking: Booking, message: str) -> BookingActionResponse:
    return BookingActionResponse(
        message=message, booking=BookingResponse.model_validate(booking)
    )


def _page(
    bookings: list[Booking], total: int, page: int, page_size: int
) -> BookingListResponse:
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages(total, page_size),
        has_next=page * page_size < total,
        has_prev=page > 1,
    )


# ============ PUBLIC ============


@router.post(
    "/",
    response_model=BookingSubmittedResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def submit_booking(
    booking_data: BookingCreate,
    db: Db,
    service: Service,
    now: Now,
) -> BookingSubmittedResponse:
    """Submit a booking request (public)."""
    booking = await service.create_booking(db, booking_data, now)
    return BookingSubmittedResponse(
        message="Booking request submitted successfully! We will contact you shortly.",
        booking_id=booking.id,
        room_type=booking.room_type,
        check_in=booking.check_in,
        check_out=booking.check_out,
        status=booking.status,
    )


# ============ ADMIN: LISTS & REPORTS ============


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    admin: Admin,
    db: Db,
    service: Service,
    status_filter: str | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
) -> BookingListResponse:
    """List active (non-archived) bookings, newest first."""
    bookings, total = await service.list_bookings(
        db, status=status_filter, archived=False, page=page, page_size=page_size
    )
    return _page(bookings, total, page, page_size)


@router.get("/archived", response_model=BookingListResponse)
async def list_archived_bookings(
    admin: Admin,
    db: Db,
    service: Service,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
) -> BookingListResponse:
    """List archived bookings, most recently touched first."""
    bookings, total = await service.list_bookings(
        db, archived=True, page=page, page_size=page_size
    )
    return _page(bookings, total, page, page_size)


@router.get("/stats", response_model=BookingStats)
async def get_booking_stats(admin: Admin, db: Db, service: Service, now: Now) -> dict:
    """Booking counts per status."""
    return await service.booking_stats(db, now)


@router.get("/payments/stats", response_model=PaymentStats)
async def get_payment_stats(admin: Admin, db: Db, service: Service, now: Now) -> dict:
    """Collection totals and payment status counts."""
    return await service.payment_stats(db, now)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: UUID, admin: Admin, db: Db, service: Service) -> Booking:
    """Get a booking by ID."""
    return await service.get_booking(db, booking_id)


@router.get("/{booking_id}/payment-suggestion", response_model=PaymentSuggestion)
async def get_payment_suggestion(
    booking_id: UUID, admin: Admin, db: Db, service: Service
) -> dict:
    """Suggested amount due from the room price table."""
    return await service.payment_suggestion(db, booking_id)


# ============ ADMIN: LIFECYCLE COMMANDS ============


@router.put("/{booking_id}/status", response_model=BookingActionResponse)
async def update_booking_status(
    booking_id: UUID,
    request: BookingStatusUpdate,
    admin: Admin,
    db: Db,
    service: Service,
    now: Now,
) -> BookingActionResponse:
    """Set the booking status."""
    booking, message = await service.set_status(
        db, booking_id, request.status, admin_notes=request.admin_notes, now=now
    )
    return _action(booking, message)


@router.put("/{booking_id}/payment", response_model=BookingActionResponse)
async def update_payment(
    booking_id: UUID,
    request: BookingPaymentUpdate,
    admin: Admin,
    db: Db,
    service: Service,
    now: Now,
) -> BookingActionResponse:
    """Record payment details. Marking paid confirms the booking."""
    booking, message = await service.set_payment(
        db,
        booking_id,
        request.payment_status,
        payment_amount=request.payment_amount,
        paid_amount=request.paid_amount,
        now=now,
    )
    return _action(booking, message)


@router.post("/{booking_id}/check-in", response_model=BookingActionResponse)
async def check_in_guest(
    booking_id: UUID,
    admin: Admin,
    db: Db,
    service: Service,
    now: Now,
    override: bool = Query(default=False, description="Allow arrival before check-in opens"),
) -> BookingActionResponse:
    """Record the guest's arrival.

    Arrival opens at 11:00 hotel time on the reserved check-in date; pass
    ``override=true`` for early arrivals.
    """
    booking = await service.get_booking(db, booking_id)
    if (
        booking.actual_check_in is None
        and not override
        and not is_arrival_open(booking.check_in, now)
    ):
        raise ArrivalNotOpen(
            f"Check-in opens at {format_local(arrival_opens_at(booking.check_in))}"
        )

    booking, message = await service.record_arrival(db, booking_id, now)
    return _action(booking, message)


@router.post("/{booking_id}/check-out", response_model=BookingActionResponse)
async def check_out_guest(
    booking_id: UUID, admin: Admin, db: Db, service: Service, now: Now
) -> BookingActionResponse:
    """Record the guest's departure and complete the booking."""
    booking, message = await service.record_departure(db, booking_id, now)
    return _action(booking, message)


@router.post("/{booking_id}/extend", response_model=BookingActionResponse)
async def extend_stay(
    booking_id: UUID, admin: Admin, db: Db, service: Service, now: Now
) -> BookingActionResponse:
    """Extend an in-house guest's stay by one night."""
    booking, message = await service.extend_stay(db, booking_id, now)
    return _action(booking, message)


@router.post("/{booking_id}/archive", response_model=BookingActionResponse)
async def archive_booking(
    booking_id: UUID, admin: Admin, db: Db, service: Service, now: Now
) -> BookingActionResponse:
    """Hide a booking from the default list."""
    booking, message = await service.archive(db, booking_id, now)
    return _action(booking, message)


@router.post("/{booking_id}/unarchive", response_model=BookingActionResponse)
async def unarchive_booking(
    booking_id: UUID, admin: Admin, db: Db, service: Service, now: Now
) -> BookingActionResponse:
    """Return an archived booking to the default list."""
    booking, message = await service.unarchive(db, booking_id, now)
    return _action(booking, message)


@router.delete("/{booking_id}")
async def delete_booking(booking_id: UUID, admin: Admin, db: Db, service: Service) -> dict:
    """Permanently delete a booking."""
    message = await service.delete_booking(db, booking_id)
    return {"message": message}
