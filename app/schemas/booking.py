"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.config import settings
from app.domain.stay_policy import RoomType

BookingStatusValue = Literal["pending", "confirmed", "cancelled", "completed"]
PaymentStatusValue = Literal["unpaid", "partial", "paid", "refunded"]


class BookingCreate(BaseModel):
    """Schema for a public booking request."""

    name: str = Field(..., min_length=1, max_length=120)
    email: EmailStr
    phone: str = Field(..., min_length=5, max_length=30)
    room_type: RoomType
    check_in: date
    check_out: date
    guests: int = Field(default=2, ge=1, le=settings.max_guests_per_booking)
    special_requests: str = Field(default="", max_length=1000)

    @field_validator("name", "phone", "special_requests")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class BookingStatusUpdate(BaseModel):
    """Schema for changing a booking's status."""

    status: BookingStatusValue
    admin_notes: str | None = Field(None, max_length=2000)


class BookingPaymentUpdate(BaseModel):
    """Schema for recording payment details."""

    payment_status: PaymentStatusValue
    payment_amount: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=10, decimal_places=2
    )
    paid_amount: Decimal = Field(
        default=Decimal("0"), ge=0, max_digits=10, decimal_places=2
    )


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    phone: str

    # Stay
    room_type: str
    check_in: date
    check_out: date
    nights: int
    guests: int
    special_requests: str

    # Status
    status: str
    admin_notes: str

    # Payment
    payment_status: str
    payment_amount: Decimal
    paid_amount: Decimal
    paid_at: datetime | None

    # Presence
    actual_check_in: datetime | None
    actual_check_out: datetime | None

    # Extensions
    original_check_out: date | None
    extended_by: int

    is_archived: bool
    created_at: datetime
    updated_at: datetime


class BookingSubmittedResponse(BaseModel):
    """Public acknowledgement of a booking request."""

    message: str
    booking_id: UUID
    room_type: str
    check_in: date
    check_out: date
    status: str


class BookingActionResponse(BaseModel):
    """Result of an admin command on a booking."""

    message: str
    booking: BookingResponse


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_prev: bool


class BookingStats(BaseModel):
    """Booking counts for the admin dashboard."""

    pending: int
    confirmed: int
    cancelled: int
    completed: int
    today: int
    total: int


class PaymentStats(BaseModel):
    """Collection figures for the admin dashboard."""

    today_collection: Decimal
    total_revenue: Decimal
    paid_count: int
    unpaid_count: int
    partial_count: int
    refunded_count: int


class PaymentSuggestion(BaseModel):
    """Pre-filled amounts for the payment form."""

    room_type: str
    nights: int
    nightly_rate: int
    suggested_amount: Decimal
    paid_amount: Decimal
    payment_status: str
