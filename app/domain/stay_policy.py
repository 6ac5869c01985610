"""Stay timing and room pricing rules.

Times:
- Arrival opens at the configured arrival hour (11:00) on the reserved check-in date
- A stay is overdue at the configured checkout hour (11:00) on the reserved check-out date

Both are evaluated in the hotel's local timezone.
"""

from datetime import UTC, date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from zoneinfo import ZoneInfo

from app.config import settings


class RoomType(str, Enum):
    """Bookable room types."""

    DELUXE = "Deluxe Room"
    EXECUTIVE = "Executive Suite"
    FAMILY = "Family Room"


def hotel_tz() -> ZoneInfo:
    return ZoneInfo(settings.hotel_timezone)


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(moment: datetime | None = None) -> datetime:
    """Normalise an aware instant to UTC; defaults to the current time."""
    return (moment or utc_now()).astimezone(UTC)


def local_today(now: datetime) -> date:
    """Calendar date at the hotel for an aware instant."""
    return now.astimezone(hotel_tz()).date()


def local_day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """UTC start/end of the hotel-local day containing ``now``."""
    start_local = datetime.combine(local_today(now), time(0, 0), tzinfo=hotel_tz())
    end_local = start_local + timedelta(days=1)
    return start_local.astimezone(UTC), end_local.astimezone(UTC)


def arrival_opens_at(check_in: date) -> datetime:
    return datetime.combine(check_in, time(settings.arrival_hour, 0), tzinfo=hotel_tz())


def checkout_deadline(check_out: date) -> datetime:
    return datetime.combine(check_out, time(settings.checkout_hour, 0), tzinfo=hotel_tz())


def is_arrival_open(check_in: date, now: datetime) -> bool:
    return now >= arrival_opens_at(check_in)


def is_stay_overdue(check_out: date, now: datetime) -> bool:
    return now >= checkout_deadline(check_out)


def format_local(moment: datetime) -> str:
    """Human-readable hotel-local timestamp, e.g. '03/06/2025, 11:00:00 AM'."""
    return moment.astimezone(hotel_tz()).strftime("%d/%m/%Y, %I:%M:%S %p")


def nightly_price(room_type: str) -> int:
    return settings.room_prices.get(room_type, settings.default_room_price)


def suggested_payment_amount(
    room_type: str, nights: int, payment_amount: Decimal | None = None
) -> Decimal:
    """Amount to pre-fill for payment entry.

    An amount already recorded on the booking wins over the price table.
    """
    if payment_amount:
        return Decimal(payment_amount)
    return Decimal(nights * nightly_price(room_type))
