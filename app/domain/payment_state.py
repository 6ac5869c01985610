"""Payment sub-ledger rules."""

from decimal import Decimal

from app.core.exceptions import ValidationError

PAYMENT_STATUSES = ("unpaid", "partial", "paid", "refunded")

# Statuses whose paid_amount counts as collected revenue
COLLECTED_PAYMENT_STATUSES = ("paid", "partial")


def validate_payment_status(value: str) -> str:
    if value not in PAYMENT_STATUSES:
        raise ValidationError(
            f"Invalid payment status '{value}'. Expected one of: {', '.join(PAYMENT_STATUSES)}"
        )
    return value


def validate_amount(name: str, value: Decimal | int | float | None) -> Decimal:
    """Coerce an amount to Decimal; absent means 0, negative is rejected."""
    if value is None:
        return Decimal("0")
    amount = Decimal(str(value))
    if amount < 0:
        raise ValidationError(f"{name} cannot be negative")
    return amount


def underpayment_warning(
    payment_status: str, payment_amount: Decimal, paid_amount: Decimal
) -> str | None:
    """Advisory message when a booking is marked paid for less than the amount due.

    Marking paid is never blocked; the caller decides whether to surface this.
    """
    if payment_status == "paid" and paid_amount < payment_amount:
        return (
            f"Paid amount {paid_amount} is less than the amount due {payment_amount}"
        )
    return None
