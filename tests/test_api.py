"""Integration tests for the HTTP API.

Run with: pytest tests/test_api.py -v
"""

from fastapi import Depends
from fastapi.testclient import TestClient

from workshop_booking_api.app.api.deps import get_database, get_waitlist_service
from workshop_booking_api.app.core.db import Database
from workshop_booking_api.app.core.errors import PersistenceError
from workshop_booking_api.app.services.waitlist_service import WaitlistService
from workshop_booking_api.app.stores.sqlite_store import SQLiteReservationStore


def _book(client: TestClient, event_id: int, name: str = "Alice", **fields):
    body = {"attendee_name": name, **fields}
    return client.post(f"/api/v1/events/{event_id}/bookings", json=body)


def _join(client: TestClient, event_id: int, name: str, email: str, **fields):
    body = {"attendee_name": name, "attendee_email": email, **fields}
    return client.post(f"/api/v1/events/{event_id}/waitlist", json=body)


class TestAvailabilityEndpoint:
    """Tests for GET /api/v1/events/{id}/availability"""

    def test_returns_tiers_and_flags(self, api_client: TestClient, event_id):
        response = api_client.get(f"/api/v1/events/{event_id}/availability")

        assert response.status_code == 200
        data = response.json()
        assert [(tier["tier"], tier["remaining"]) for tier in data["tiers"]] == [("full", 2), ("concession", 1)]
        assert data["total_remaining"] == 3
        assert data["sold_out"] is False
        assert data["waitlist_count"] == 0
        assert data["max_per_booking"] == 10

    def test_draft_event_returns_404(self, api_client: TestClient, make_event):
        event_id = make_event(status="draft")

        response = api_client.get(f"/api/v1/events/{event_id}/availability")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "EVENT_NOT_FOUND"


class TestBookingEndpoints:
    """Tests for booking routes."""

    def test_create_booking_returns_receipt(self, api_client: TestClient, event_id):
        response = _book(api_client, event_id, attendee_email="alice@example.com", full_quantity=2)

        assert response.status_code == 201
        data = response.json()
        assert data["total_quantity"] == 2
        assert data["total_price"] == 20.0
        assert data["lines"] == [{"tier": "full", "quantity": 2, "unit_price": 10.0}]
        assert data["reservation_id"]

    def test_capacity_conflict_reports_remaining(self, api_client: TestClient, event_id):
        _book(api_client, event_id, full_quantity=2)

        response = _book(api_client, event_id, name="Bob", full_quantity=1)

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "CAPACITY_EXCEEDED"
        assert detail["field"] == "full"
        assert detail["remaining"] == 0

    def test_validation_error_returns_400(self, api_client: TestClient, event_id):
        response = _book(api_client, event_id, name="A", full_quantity=1)

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "code": "NAME_LENGTH",
            "message": "Name must be 2 to 100 characters.",
            "field": "attendee_name",
        }

    def test_too_many_seats(self, api_client: TestClient, event_id):
        response = _book(api_client, event_id, full_quantity=6, concession_quantity=5)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "TOO_MANY_SEATS"

    def test_unknown_event_returns_404(self, api_client: TestClient):
        response = _book(api_client, 999, full_quantity=1)

        assert response.status_code == 404

    def test_confirmation_round_trip(self, api_client: TestClient, event_id):
        receipt = _book(api_client, event_id, full_quantity=1, concession_quantity=1).json()

        response = api_client.get(f"/api/v1/events/{event_id}/reservations/{receipt['reservation_id']}")

        assert response.status_code == 200
        assert response.json()["total_price"] == 15.0

    def test_unknown_confirmation_returns_404(self, api_client: TestClient, event_id):
        response = api_client.get(f"/api/v1/events/{event_id}/reservations/missing")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "RESERVATION_NOT_FOUND"

    def test_list_bookings(self, api_client: TestClient, event_id):
        _book(api_client, event_id, full_quantity=1, concession_quantity=1, dietary_notes="Vegan")

        response = api_client.get(f"/api/v1/events/{event_id}/bookings")

        assert response.status_code == 200
        rows = response.json()
        assert [(row["tier"], row["quantity"], row["dietary_notes"]) for row in rows] == [
            ("full", 1, "Vegan"),
            ("concession", 1, "Vegan"),
        ]


class TestWaitlistEndpoints:
    """Tests for waitlist routes."""

    def test_join_list_and_close(self, api_client: TestClient, event_id):
        _book(api_client, event_id, full_quantity=2, concession_quantity=1)
        assert api_client.get(f"/api/v1/events/{event_id}/availability").json()["sold_out"] is True

        bob = _join(api_client, event_id, "Bob", "bob@example.com")
        carol = _join(api_client, event_id, "Carol", "carol@example.com", quantity=2)
        assert bob.status_code == 201
        assert carol.status_code == 201

        listing = api_client.get("/api/v1/waitlist", params={"event_id": event_id}).json()
        assert [(entry["attendee_name"], entry["position"]) for entry in listing] == [("Bob", 1), ("Carol", 2)]

        bob_id = bob.json()["entry"]["id"]
        notified = api_client.post(f"/api/v1/waitlist/{bob_id}/notify")
        assert notified.status_code == 200
        assert notified.json()["status"] == "notified"
        assert notified.json()["notified_at"] is not None

        again = api_client.post(f"/api/v1/waitlist/{bob_id}/remove")
        assert again.status_code == 409
        assert again.json()["detail"]["code"] == "WAITLIST_ENTRY_CLOSED"

        listing = api_client.get("/api/v1/waitlist").json()
        assert [(entry["attendee_name"], entry["position"]) for entry in listing] == [("Carol", 1)]

    def test_duplicate_join_returns_409(self, api_client: TestClient, event_id):
        _join(api_client, event_id, "Bob", "bob@example.com")

        response = _join(api_client, event_id, "Bob", "bob@example.com")

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "ALREADY_ON_WAITLIST"

    def test_join_requires_email(self, api_client: TestClient, event_id):
        response = _join(api_client, event_id, "Bob", "")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "EMAIL_REQUIRED"

    def test_status_check(self, api_client: TestClient, event_id):
        _join(api_client, event_id, "Bob", "bob@example.com", ticket_type="concession")

        waiting = api_client.get(f"/api/v1/events/{event_id}/waitlist/status", params={"email": "bob@example.com"})
        absent = api_client.get(f"/api/v1/events/{event_id}/waitlist/status", params={"email": "eve@example.com"})

        assert waiting.json()["on_waitlist"] is True
        assert waiting.json()["position"] == 1
        assert waiting.json()["tier"] == "concession"
        assert absent.json() == {
            "on_waitlist": False,
            "position": None,
            "event_title": None,
            "tier": None,
            "quantity": None,
            "requested_at": None,
        }

    def test_get_entry(self, api_client: TestClient, event_id):
        entry_id = _join(api_client, event_id, "Bob", "bob@example.com").json()["entry"]["id"]

        response = api_client.get(f"/api/v1/waitlist/{entry_id}")

        assert response.status_code == 200
        assert response.json()["attendee_email"] == "bob@example.com"

    def test_unknown_entry_returns_404(self, api_client: TestClient):
        assert api_client.get("/api/v1/waitlist/404").status_code == 404
        assert api_client.post("/api/v1/waitlist/404/notify").status_code == 404


class UnreadableWaitlistStore(SQLiteReservationStore):
    """Store whose waitlist reads fail the way a locked or corrupt database would."""

    def find_waiting_entry(self, event_id, email):
        raise PersistenceError()

    def list_waiting_entries(self, event_id=None):
        raise PersistenceError()


def _unreadable_waitlist_service(database: Database = Depends(get_database)):
    with database.connection() as conn:
        yield WaitlistService(UnreadableWaitlistStore(conn))


class TestStoreFailures:
    """Store failures surface as a structured 500 without internals."""

    EXPECTED_DETAIL = {
        "code": "PERSISTENCE_FAILURE",
        "message": "Could not complete the request.",
        "field": None,
    }

    def test_waitlist_status(self, api_client: TestClient, event_id):
        api_client.app.dependency_overrides[get_waitlist_service] = _unreadable_waitlist_service

        response = api_client.get(f"/api/v1/events/{event_id}/waitlist/status", params={"email": "bob@example.com"})

        assert response.status_code == 500
        assert response.json()["detail"] == self.EXPECTED_DETAIL

    def test_waitlist_listing(self, api_client: TestClient, event_id):
        api_client.app.dependency_overrides[get_waitlist_service] = _unreadable_waitlist_service

        response = api_client.get("/api/v1/waitlist", params={"event_id": event_id})

        assert response.status_code == 500
        assert response.json()["detail"] == self.EXPECTED_DETAIL
