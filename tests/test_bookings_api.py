"""HTTP surface of the booking endpoints."""

from decimal import Decimal
from uuid import uuid4

import pytest

from app.api.deps import get_now
from tests.factories import booking_payload, local

BOOKINGS = "/api/v1/bookings"


@pytest.fixture
async def booking_id(admin_client) -> str:
    response = await admin_client.post(f"{BOOKINGS}/", json=booking_payload())
    assert response.status_code == 201
    return response.json()["booking_id"]


class TestPublicSubmit:
    async def test_submit_returns_acknowledgement(self, api_app, client, clock):
        api_app.dependency_overrides[get_now] = lambda: clock["now"]

        response = await client.post(f"{BOOKINGS}/", json=booking_payload())

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["room_type"] == "Deluxe Room"
        assert body["check_in"] == "2025-06-01"

    async def test_past_check_in_is_rejected(self, api_app, client):
        api_app.dependency_overrides[get_now] = lambda: local(2025, 6, 5, 9, 0)

        response = await client.post(f"{BOOKINGS}/", json=booking_payload())

        assert response.status_code == 422
        assert "past" in response.json()["detail"]

    async def test_unknown_room_type(self, client):
        payload = booking_payload()
        payload["room_type"] = "Penthouse"

        response = await client.post(f"{BOOKINGS}/", json=payload)

        assert response.status_code == 422

    async def test_too_many_guests(self, client):
        payload = booking_payload()
        payload["guests"] = 7

        response = await client.post(f"{BOOKINGS}/", json=payload)

        assert response.status_code == 422


class TestAdminOnly:
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", f"{BOOKINGS}/"),
            ("get", f"{BOOKINGS}/stats"),
            ("post", f"{BOOKINGS}/{uuid4()}/check-in"),
            ("delete", f"{BOOKINGS}/{uuid4()}"),
        ],
    )
    async def test_requires_login(self, client, method, path):
        response = await getattr(client, method)(path)
        assert response.status_code == 401


class TestArrivalGate:
    async def test_closed_before_eleven_on_check_in_day(self, admin_client, booking_id, clock):
        clock["now"] = local(2025, 6, 1, 10, 30)

        response = await admin_client.post(f"{BOOKINGS}/{booking_id}/check-in")

        assert response.status_code == 400
        assert "01/06/2025, 11:00:00 AM" in response.json()["detail"]

    async def test_override_allows_early_arrival(self, admin_client, booking_id, clock):
        clock["now"] = local(2025, 6, 1, 10, 30)

        response = await admin_client.post(
            f"{BOOKINGS}/{booking_id}/check-in", params={"override": "true"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Guest checked in at 01/06/2025, 10:30:00 AM"
        assert body["booking"]["status"] == "confirmed"

    async def test_open_from_eleven(self, admin_client, booking_id, clock):
        clock["now"] = local(2025, 6, 1, 11, 5)

        response = await admin_client.post(f"{BOOKINGS}/{booking_id}/check-in")

        assert response.status_code == 200
        assert response.json()["booking"]["actual_check_in"] is not None

    async def test_second_check_in_conflicts(self, admin_client, booking_id, clock):
        clock["now"] = local(2025, 6, 1, 11, 5)
        await admin_client.post(f"{BOOKINGS}/{booking_id}/check-in")

        response = await admin_client.post(f"{BOOKINGS}/{booking_id}/check-in")

        assert response.status_code == 409


class TestCommands:
    async def test_status_update(self, admin_client, booking_id):
        response = await admin_client.put(
            f"{BOOKINGS}/{booking_id}/status",
            json={"status": "cancelled", "admin_notes": "Guest called to cancel"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Booking status updated to cancelled"
        assert body["booking"]["admin_notes"] == "Guest called to cancel"

    async def test_invalid_status_value(self, admin_client, booking_id):
        response = await admin_client.put(
            f"{BOOKINGS}/{booking_id}/status", json={"status": "archived"}
        )
        assert response.status_code == 422

    async def test_full_payment_confirms(self, admin_client, booking_id):
        response = await admin_client.put(
            f"{BOOKINGS}/{booking_id}/payment",
            json={"payment_status": "paid", "payment_amount": 5000, "paid_amount": 5000},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Payment confirmed! Booking auto-confirmed."
        assert body["booking"]["status"] == "confirmed"
        assert body["booking"]["paid_at"] is not None

    @pytest.mark.parametrize(
        "amounts",
        [
            {"payment_amount": "123456789", "paid_amount": 0},
            {"payment_amount": 5000, "paid_amount": "2500.005"},
        ],
    )
    async def test_amount_outside_ledger_precision(self, admin_client, booking_id, amounts):
        response = await admin_client.put(
            f"{BOOKINGS}/{booking_id}/payment", json={"payment_status": "partial", **amounts}
        )

        assert response.status_code == 422
        booking = (await admin_client.get(f"{BOOKINGS}/{booking_id}")).json()
        assert booking["payment_status"] == "unpaid"

    async def test_stay_from_arrival_to_departure(self, admin_client, booking_id, clock):
        clock["now"] = local(2025, 6, 1, 12, 0)
        await admin_client.post(f"{BOOKINGS}/{booking_id}/check-in")

        extended = await admin_client.post(f"{BOOKINGS}/{booking_id}/extend")
        assert extended.status_code == 200
        assert extended.json()["message"] == "Stay extended by 1 day. New checkout: 04/06/2025"
        assert extended.json()["booking"]["original_check_out"] == "2025-06-03"
        assert extended.json()["booking"]["nights"] == 3

        clock["now"] = local(2025, 6, 4, 9, 45)
        departed = await admin_client.post(f"{BOOKINGS}/{booking_id}/check-out")
        assert departed.status_code == 200
        assert departed.json()["booking"]["status"] == "completed"

        again = await admin_client.post(f"{BOOKINGS}/{booking_id}/check-out")
        assert again.status_code == 409

    async def test_extend_before_arrival_conflicts(self, admin_client, booking_id):
        response = await admin_client.post(f"{BOOKINGS}/{booking_id}/extend")
        assert response.status_code == 409

    async def test_unknown_booking(self, admin_client):
        response = await admin_client.post(f"{BOOKINGS}/{uuid4()}/archive")
        assert response.status_code == 404

    async def test_delete(self, admin_client, booking_id):
        response = await admin_client.delete(f"{BOOKINGS}/{booking_id}")
        assert response.json() == {"message": "Booking deleted successfully"}

        missing = await admin_client.get(f"{BOOKINGS}/{booking_id}")
        assert missing.status_code == 404


class TestViews:
    async def test_archive_moves_booking_between_lists(self, admin_client, booking_id):
        other = await admin_client.post(
            f"{BOOKINGS}/", json=booking_payload(name="Rohan Iyer")
        )
        assert other.status_code == 201

        archived = await admin_client.post(f"{BOOKINGS}/{booking_id}/archive")
        assert archived.json()["message"] == "Booking archived successfully"

        active = (await admin_client.get(f"{BOOKINGS}/")).json()
        assert active["total"] == 1
        assert active["bookings"][0]["name"] == "Rohan Iyer"

        hidden = (await admin_client.get(f"{BOOKINGS}/archived")).json()
        assert [b["id"] for b in hidden["bookings"]] == [booking_id]

        await admin_client.post(f"{BOOKINGS}/{booking_id}/unarchive")
        assert (await admin_client.get(f"{BOOKINGS}/")).json()["total"] == 2

    async def test_status_filter_and_pagination(self, admin_client):
        for i in range(3):
            await admin_client.post(f"{BOOKINGS}/", json=booking_payload(name=f"Guest {i}"))

        page = (
            await admin_client.get(f"{BOOKINGS}/", params={"status": "pending", "page_size": 2})
        ).json()

        assert page["total"] == 3
        assert len(page["bookings"]) == 2
        assert page["total_pages"] == 2
        assert page["has_next"] is True
        assert page["has_prev"] is False

        confirmed = (await admin_client.get(f"{BOOKINGS}/", params={"status": "confirmed"})).json()
        assert confirmed["total"] == 0

    async def test_booking_stats(self, admin_client, booking_id):
        await admin_client.post(f"{BOOKINGS}/", json=booking_payload(name="Rohan Iyer"))
        await admin_client.put(f"{BOOKINGS}/{booking_id}/status", json={"status": "confirmed"})

        stats = (await admin_client.get(f"{BOOKINGS}/stats")).json()

        assert stats == {
            "pending": 1,
            "confirmed": 1,
            "cancelled": 0,
            "completed": 0,
            "today": 2,
            "total": 2,
        }

    async def test_payment_stats(self, admin_client, booking_id):
        await admin_client.post(f"{BOOKINGS}/", json=booking_payload(name="Rohan Iyer"))
        await admin_client.put(
            f"{BOOKINGS}/{booking_id}/payment",
            json={"payment_status": "paid", "payment_amount": 5000, "paid_amount": 5000},
        )

        stats = (await admin_client.get(f"{BOOKINGS}/payments/stats")).json()

        assert Decimal(stats["today_collection"]) == 5000
        assert Decimal(stats["total_revenue"]) == 5000
        assert stats["paid_count"] == 1
        assert stats["unpaid_count"] == 1

    async def test_payment_suggestion(self, admin_client, booking_id):
        body = (await admin_client.get(f"{BOOKINGS}/{booking_id}/payment-suggestion")).json()

        assert body["nights"] == 2
        assert body["nightly_rate"] == 2500
        assert Decimal(body["suggested_amount"]) == 5000


async def test_health_reports_sweep_backend(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "ok"
    assert response.json()["auto_checkout"] == "none"
