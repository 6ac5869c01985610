"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def utc_now() -> datetime:
    return datetime.now(UTC)


class Booking(Base):
    """Guest reservation with status, payment and presence tracking."""

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_bookings_stay_dates"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Guest
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)

    # Stay
    room_type: Mapped[str] = mapped_column(
        String(30), nullable=False
    )  # Deluxe Room, Executive Suite, Family Room
    check_in: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    check_out: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    guests: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    special_requests: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, confirmed, cancelled, completed
    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Payment
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unpaid"
    )  # unpaid, partial, paid, refunded
    payment_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0")
    )
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Physical arrival/departure, distinct from the reserved dates
    actual_check_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    actual_check_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Extensions
    original_check_out: Mapped[date | None] = mapped_column(Date)
    extended_by: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    @property
    def nights(self) -> int:
        """Calculate number of nights."""
        return (self.check_out - self.check_in).days

    @property
    def is_in_house(self) -> bool:
        """Guest has arrived and not yet departed."""
        return self.actual_check_in is not None and self.actual_check_out is None
