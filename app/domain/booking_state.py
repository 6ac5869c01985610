"""Booking status state machine."""

from app.core.exceptions import InvalidBookingStatus, ValidationError

BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")

# Enforced only in strict mode; the default path overwrites status freely.
BOOKING_TRANSITIONS = {
    "pending": {"confirmed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

# Statuses the auto-checkout sweep is allowed to complete
SWEEPABLE_STATUSES = ("pending", "confirmed")


def validate_booking_status(value: str) -> str:
    if value not in BOOKING_STATUSES:
        raise ValidationError(
            f"Invalid status '{value}'. Expected one of: {', '.join(BOOKING_STATUSES)}"
        )
    return value


def assert_booking_transition(current: str, target: str) -> None:
    allowed = BOOKING_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current} → {target}"
        )


def assert_not_cancelled(current: str, action: str) -> None:
    """Strict-mode guard against reviving a cancelled booking."""
    if current == "cancelled":
        raise InvalidBookingStatus(f"Cannot {action} a cancelled booking")
