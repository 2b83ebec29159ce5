import pytest
from fastapi.testclient import TestClient

from kitchen_booking.database import get_db
from kitchen_booking.config import settings
from kitchen_booking.dependencies import get_notifier, get_redis
from kitchen_booking.redis_client import redis_client
from kitchen_booking.main import app
from kitchen_booking.models.generated import KitchenBookings
from kitchen_booking.services.events import BookingNotifier

from .conftest import CHEF_ID, MANAGER_ID, OTHER_CHEF_ID

CHEF = {"X-User-Id": str(CHEF_ID), "X-User-Role": "chef"}
OTHER_CHEF = {"X-User-Id": str(OTHER_CHEF_ID), "X-User-Role": "chef"}
MANAGER = {"X-User-Id": str(MANAGER_ID), "X-User-Role": "manager"}


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = lambda: None
    app.dependency_overrides[get_notifier] = lambda: BookingNotifier(None)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def booking_body(kitchen, start="10:00", end="12:00"):
    return {"kitchenId": kitchen.id, "bookingDate": "2030-06-03", "startTime": start, "endTime": end}


class TestBrowsing:
    def test_slots(self, client, kitchen):
        response = client.get(f"/kitchens/{kitchen.id}/slots", params={"date": "2030-06-03"})

        assert response.status_code == 200
        slots = response.json()
        assert len(slots) == 12
        assert slots[0] == {"time": "08:00", "availableCount": 1, "capacity": 1, "isFullyBooked": False}

    def test_slots_unknown_kitchen(self, client):
        response = client.get("/kitchens/999/slots", params={"date": "2030-06-03"})

        assert response.status_code == 404
        assert response.json()["code"] == "NotFound"

    def test_policy(self, client, kitchen):
        response = client.get(f"/kitchens/{kitchen.id}/policy", params={"date": "2030-06-03"})

        assert response.status_code == 200
        assert response.json() == {"kitchenId": kitchen.id, "date": "2030-06-03", "maxSlotsPerChef": 2}


class TestBookingEndpoints:
    def test_create_booking(self, client, kitchen):
        response = client.post("/bookings/", json=booking_body(kitchen), headers=CHEF)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["chefId"] == CHEF_ID
        assert body["totalPrice"] == 4000
        assert body["serviceFee"] == 200
        assert body["bookingDate"] == "2030-06-03"

    def test_conflict_error_body(self, client, kitchen):
        first = client.post("/bookings/", json=booking_body(kitchen), headers=CHEF).json()
        response = client.post("/bookings/", json=booking_body(kitchen, "11:00", "13:00"), headers=OTHER_CHEF)

        assert response.status_code == 409
        assert response.json() == {
            "error": "The requested time overlaps an existing booking",
            "code": "SlotConflict",
            "details": {"conflictingBookingIds": [first["id"]]},
        }

    def test_not_eligible(self, client, kitchen):
        headers = {"X-User-Id": "55", "X-User-Role": "chef"}
        response = client.post("/bookings/", json=booking_body(kitchen), headers=headers)

        assert response.status_code == 403
        assert response.json()["details"] == {"applicationStatus": "none"}

    def test_malformed_time_rejected_by_schema(self, client, kitchen):
        response = client.post("/bookings/", json=booking_body(kitchen, "10am", "12:00"), headers=CHEF)
        assert response.status_code == 422

    def test_manager_cannot_book_as_chef(self, client, kitchen):
        response = client.post("/bookings/", json=booking_body(kitchen), headers=MANAGER)
        assert response.status_code == 403

    def test_missing_identity(self, client, kitchen):
        response = client.post("/bookings/", json=booking_body(kitchen))
        assert response.status_code == 401

    def test_unknown_role(self, client, kitchen):
        headers = {"X-User-Id": "1", "X-User-Role": "root"}
        assert client.get("/bookings/1", headers=headers).status_code == 403

    def test_confirm_then_cancel(self, client, kitchen):
        booking = client.post("/bookings/", json=booking_body(kitchen), headers=CHEF).json()

        confirmed = client.put(f"/bookings/{booking['id']}/confirm", headers=MANAGER)
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "confirmed"

        slots = client.get(f"/kitchens/{kitchen.id}/slots", params={"date": "2030-06-03"}).json()
        assert {s["time"] for s in slots if s["isFullyBooked"]} == {"10:00", "11:00"}

        cancelled = client.put(f"/bookings/{booking['id']}/cancel", headers=MANAGER)
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"
        assert cancelled.json()["cancelledBy"] == MANAGER_ID
        assert cancelled.json()["updatedAt"] is not None

    def test_get_booking_visibility(self, client, kitchen):
        booking = client.post("/bookings/", json=booking_body(kitchen), headers=CHEF).json()

        assert client.get(f"/bookings/{booking['id']}", headers=CHEF).status_code == 200
        assert client.get(f"/bookings/{booking['id']}", headers=OTHER_CHEF).status_code == 403
        assert client.get("/bookings/999", headers=CHEF).status_code == 404

    def test_external_booking(self, client, kitchen, db):
        body = booking_body(kitchen) | {"externalContact": {"name": "Pop-up Pies", "phone": "709-555-0100"}}
        response = client.post("/bookings/external", json=body, headers=MANAGER)

        assert response.status_code == 201
        assert response.json()["bookingType"] == "external"
        assert db.query(KitchenBookings).count() == 1


class TestAvailabilityEndpoints:
    def test_weekly_row_replaced(self, client, kitchen):
        body = {"dayOfWeek": 1, "startTime": "10:00", "endTime": "14:00", "maxSlotsPerChef": 3}
        response = client.post(f"/kitchens/{kitchen.id}/availability", json=body, headers=MANAGER)

        assert response.status_code == 201
        rows = client.get(f"/kitchens/{kitchen.id}/availability").json()
        monday = [r for r in rows if r["dayOfWeek"] == 1]
        assert len(monday) == 1
        assert monday[0]["startTime"] == "10:00"

        slots = client.get(f"/kitchens/{kitchen.id}/slots", params={"date": "2030-06-03"}).json()
        assert [s["time"] for s in slots] == ["10:00", "11:00", "12:00", "13:00"]

    def test_override_lifecycle(self, client, kitchen):
        body = {"specificDate": "2030-06-03", "isAvailable": False, "reason": "Inspection"}
        created = client.post(f"/kitchens/{kitchen.id}/overrides", json=body, headers=MANAGER)
        assert created.status_code == 201

        slots = client.get(f"/kitchens/{kitchen.id}/slots", params={"date": "2030-06-03"}).json()
        assert slots == []

        deleted = client.delete(f"/kitchens/{kitchen.id}/overrides/{created.json()['id']}", headers=MANAGER)
        assert deleted.status_code == 204
        assert client.get(f"/kitchens/{kitchen.id}/overrides").json() == []

    def test_invalid_override_range(self, client, kitchen):
        body = {"specificDate": "2030-06-03", "isAvailable": True, "startTime": "14:00", "endTime": "10:00"}
        response = client.post(f"/kitchens/{kitchen.id}/overrides", json=body, headers=MANAGER)

        assert response.status_code == 400
        assert response.json()["code"] == "InvalidRange"

    def test_chef_cannot_change_schedule(self, client, kitchen):
        body = {"dayOfWeek": 1, "startTime": "10:00", "endTime": "14:00"}
        response = client.post(f"/kitchens/{kitchen.id}/availability", json=body, headers=CHEF)
        assert response.status_code == 403


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


class TestToggles:
    def test_notifications_independent_of_slot_cache(self, monkeypatch):
        monkeypatch.setattr(settings, "slots_cache_enabled", False)
        monkeypatch.setattr(settings, "notifications_enabled", True)

        assert get_redis() is None
        assert get_notifier().redis is redis_client

    def test_notifications_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "notifications_enabled", False)

        assert get_notifier().redis is None
