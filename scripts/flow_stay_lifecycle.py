#!/usr/bin/env python3
"""
End-to-end stay flow against a running API.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_stay_lifecycle.py --check-in 2026-11-01 --check-out 2026-11-03
    python scripts/flow_stay_lifecycle.py --check-in 2026-11-01 --check-out 2026-11-03 --room-type "Family Room" --early-arrival

Flow:
    1. Submit booking (public)
    2. Login as admin
    3. Record partial payment
    4. Record full payment (auto-confirms)
    5. Check in guest
    6. Extend stay by one night
    7. Check out guest
    8. Archive booking
"""

import argparse
import json
import sys

import httpx

BASE_URL = "http://localhost:8000"
API = f"{BASE_URL}/api/v1"

ADMIN_EMAIL = "admin@hotelortus.com"
ADMIN_PASSWORD = "Admin@123"


class BookingClient:
    """Thin client over the booking endpoints."""

    def __init__(self, base_url: str = API, token: str | None = None) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = httpx.Client(
            base_url=base_url, headers=headers, timeout=10.0, follow_redirects=True
        )

    def _send(self, method: str, path: str, **kwargs) -> dict:
        response = self._http.request(method, path, **kwargs)
        data = response.json() if response.text else {}
        if response.status_code >= 400:
            print(f"ERROR ({response.status_code}): {json.dumps(data, indent=2)}")
            sys.exit(1)
        return data

    def login(self, email: str, password: str) -> "BookingClient":
        tokens = self._send("POST", "/auth/login", json={"email": email, "password": password})
        return BookingClient(str(self._http.base_url), tokens["access_token"])

    def submit(self, **booking) -> dict:
        return self._send("POST", "/bookings/", json=booking)

    def set_payment(self, booking_id: str, payment_status: str, amount: float, paid: float) -> dict:
        return self._send(
            "PUT",
            f"/bookings/{booking_id}/payment",
            json={"payment_status": payment_status, "payment_amount": amount, "paid_amount": paid},
        )

    def payment_suggestion(self, booking_id: str) -> dict:
        return self._send("GET", f"/bookings/{booking_id}/payment-suggestion")

    def check_in(self, booking_id: str, override: bool = False) -> dict:
        return self._send(
            "POST", f"/bookings/{booking_id}/check-in", params={"override": str(override).lower()}
        )

    def command(self, booking_id: str, action: str) -> dict:
        return self._send("POST", f"/bookings/{booking_id}/{action}")


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_booking(result: dict, fields: list[str]):
    """Print the command message and selected booking fields."""
    print(result.get("message", ""))
    booking = result.get("booking", {})
    print(json.dumps({k: booking.get(k) for k in fields}, indent=2, default=str))


def main():
    parser = argparse.ArgumentParser(description="Complete stay lifecycle flow")
    parser.add_argument("--check-in", required=True, help="Check-in date (YYYY-MM-DD)")
    parser.add_argument("--check-out", required=True, help="Check-out date (YYYY-MM-DD)")
    parser.add_argument("--room-type", default="Deluxe Room", help="Room type")
    parser.add_argument("--guests", type=int, default=2, help="Number of guests")
    parser.add_argument("--early-arrival", action="store_true", help="Override the arrival window")
    args = parser.parse_args()

    public = BookingClient()

    # Step 1: Submit booking
    print_step(1, "Submit booking")
    submitted = public.submit(
        name="Flow Test Guest",
        email="flow.guest@example.com",
        phone="+919800000000",
        room_type=args.room_type,
        check_in=args.check_in,
        check_out=args.check_out,
        guests=args.guests,
    )
    booking_id = submitted["booking_id"]
    print(json.dumps(submitted, indent=2))

    # Step 2: Login as admin
    print_step(2, "Login as admin")
    admin = public.login(ADMIN_EMAIL, ADMIN_PASSWORD)
    print(f"Logged in as {ADMIN_EMAIL}")

    suggestion = admin.payment_suggestion(booking_id)
    amount = float(suggestion["suggested_amount"])
    print(f"Suggested amount: {amount:,.2f} ({suggestion['nights']} nights)")

    # Step 3: Partial payment
    print_step(3, "Record partial payment")
    print_booking(
        admin.set_payment(booking_id, "partial", amount, amount / 2),
        ["status", "payment_status", "payment_amount", "paid_amount"],
    )

    # Step 4: Full payment
    print_step(4, "Record full payment")
    print_booking(
        admin.set_payment(booking_id, "paid", amount, amount),
        ["status", "payment_status", "paid_amount", "paid_at"],
    )

    # Step 5: Check-in
    print_step(5, "Check in guest")
    print_booking(admin.check_in(booking_id, args.early_arrival), ["status", "actual_check_in"])

    # Step 6: Extend
    print_step(6, "Extend stay")
    print_booking(
        admin.command(booking_id, "extend"),
        ["check_out", "original_check_out", "extended_by"],
    )

    # Step 7: Check-out
    print_step(7, "Check out guest")
    print_booking(admin.command(booking_id, "check-out"), ["status", "actual_check_out"])

    # Step 8: Archive
    print_step(8, "Archive booking")
    print_booking(admin.command(booking_id, "archive"), ["status", "is_archived"])

    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
