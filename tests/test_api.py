"""HTTP-level tests through FastAPI's TestClient."""

from fastapi.testclient import TestClient

from scheduler.config import Settings
from scheduler.main import create_app
from scheduler.services.events import BookingNotifier
from tests.conftest import ADMIN_HEADERS, DEFAULT_GRID, NEXT_MONDAY, SATURDAY


def _booking_payload(**overrides) -> dict:
    payload = {
        "name": "Ana García",
        "email": "ana@example.com",
        "phone": "+34 600 000 000",
        "service": "Consulta general",
        "date": NEXT_MONDAY.isoformat(),
        "timeSlot": "10:15",
    }
    payload.update(overrides)
    return payload


def _create(client, **overrides) -> dict:
    response = client.post("/reservations", json=_booking_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestSettingsEndpoints:

    def test_get_defaults_in_camel_case(self, client):
        response = client.get("/reservation-settings")

        assert response.status_code == 200
        body = response.json()
        assert body["defaultDuration"] == 60
        assert body["bufferTime"] == 15
        assert body["maxAdvanceDays"] == 30
        assert body["isActive"] is True
        assert body["businessHours"]["saturday"]["enabled"] is False
        assert "Reunión" in body["allowedServices"]

    def test_update_requires_admin_token(self, client):
        response = client.put("/reservation-settings", json={"bufferTime": 0})
        assert response.status_code == 401

        response = client.put(
            "/reservation-settings",
            json={"bufferTime": 0},
            headers={"X-Admin-Token": "wrong"},
        )
        assert response.status_code == 401

    def test_partial_update(self, client):
        response = client.put(
            "/reservation-settings",
            json={"bufferTime": 0, "businessHours": {"saturday": {"enabled": True, "open": "10:00", "close": "13:00"}}},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["bufferTime"] == 0
        assert body["defaultDuration"] == 60
        assert body["businessHours"]["saturday"]["enabled"] is True
        assert body["businessHours"]["monday"]["open"] == "09:00"

        slots = client.get(f"/reservations/available-slots/{SATURDAY.isoformat()}").json()
        assert slots["availableSlots"] == ["10:00", "11:00", "12:00"]

    def test_policy_violations_listed(self, client):
        response = client.put(
            "/reservation-settings",
            json={"defaultDuration": 0, "maxAdvanceDays": 0},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "validation_error"
        assert set(body["errors"]) == {"defaultDuration", "maxAdvanceDays"}
        assert client.get("/reservation-settings").json()["defaultDuration"] == 60

    def test_malformed_time_rejected(self, client):
        response = client.put(
            "/reservation-settings",
            json={"businessHours": {"monday": {"enabled": True, "open": "9am", "close": "18:00"}}},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 400
        assert "businessHours.monday.open" in response.json()["errors"]


class TestAvailableSlotsEndpoint:

    def test_response_shape(self, client):
        response = client.get(f"/reservations/available-slots/{NEXT_MONDAY.isoformat()}")

        assert response.status_code == 200
        body = response.json()
        assert body["date"] == NEXT_MONDAY.isoformat()
        assert body["availableSlots"] == DEFAULT_GRID
        assert body["businessHours"] == {"enabled": True, "open": "09:00", "close": "18:00"}

    def test_closed_day(self, client):
        body = client.get(f"/reservations/available-slots/{SATURDAY.isoformat()}").json()
        assert body["availableSlots"] == []
        assert body["businessHours"] is None

    def test_booked_slot_disappears(self, client):
        _create(client, timeSlot="09:00")
        body = client.get(f"/reservations/available-slots/{NEXT_MONDAY.isoformat()}").json()
        assert body["availableSlots"] == DEFAULT_GRID[1:]

    def test_invalid_date(self, client):
        response = client.get("/reservations/available-slots/not-a-date")
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"


class TestCreateEndpoint:

    def test_created(self, client, notifier):
        body = _create(client, notes="Allergic to latex")

        assert body["status"] == "pending"
        assert body["date"] == NEXT_MONDAY.isoformat()
        assert body["timeSlot"] == "10:15"
        assert body["duration"] == 60
        assert body["notes"] == "Allergic to latex"
        assert body["cancelReason"] is None
        assert notifier.events == [("reservation_created", body["id"])]

    def test_duplicate_slot_conflicts(self, client):
        _create(client)

        response = client.post("/reservations", json=_booking_payload(email="other@example.com"))

        assert response.status_code == 409
        assert response.json()["code"] == "slot_conflict"

    def test_off_grid_slot(self, client):
        response = client.post("/reservations", json=_booking_payload(timeSlot="10:00"))

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_slot"

    def test_invalid_fields(self, client):
        response = client.post(
            "/reservations",
            json=_booking_payload(email="not-an-email", timeSlot="25:99", name=""),
        )

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert "email" in errors
        assert "timeSlot" in errors
        assert "name" in errors

    def test_missing_fields(self, client):
        response = client.post("/reservations", json={"name": "Ana"})

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert {"email", "date", "timeSlot"} <= set(errors)

    def test_disabled_scheduling(self, client):
        client.put("/reservation-settings", json={"isActive": False}, headers=ADMIN_HEADERS)

        response = client.post("/reservations", json=_booking_payload())

        assert response.status_code == 503
        assert response.json()["code"] == "service_unavailable"


class TestAdminEndpoints:

    def test_admin_routes_require_token(self, client):
        created = _create(client)

        assert client.get("/reservations").status_code == 401
        assert client.get(f"/reservations/{created['id']}").status_code == 401
        assert client.put(f"/reservations/{created['id']}/confirm").status_code == 401

    def test_list_with_filters(self, client):
        first = _create(client, timeSlot="09:00")
        second = _create(client, timeSlot="11:30", email="bob@example.com")
        client.put(f"/reservations/{first['id']}/confirm", headers=ADMIN_HEADERS)

        everything = client.get("/reservations", headers=ADMIN_HEADERS).json()
        assert {r["id"] for r in everything} == {first["id"], second["id"]}

        confirmed = client.get("/reservations", params={"status": "confirmed"}, headers=ADMIN_HEADERS).json()
        assert [r["id"] for r in confirmed] == [first["id"]]

        other_day = client.get("/reservations", params={"date": "2026-03-10"}, headers=ADMIN_HEADERS).json()
        assert other_day == []

    def test_unknown_status_filter(self, client):
        response = client.get("/reservations", params={"status": "archived"}, headers=ADMIN_HEADERS)
        assert response.status_code == 400

    def test_edit_rejects_null_required_fields(self, client):
        created = _create(client)

        for field in ("name", "email"):
            response = client.put(
                f"/reservations/{created['id']}",
                json={field: None},
                headers=ADMIN_HEADERS,
            )
            assert response.status_code == 400, response.text
            assert response.json()["code"] == "validation_error"
            assert field in response.json()["errors"]

        fetched = client.get(f"/reservations/{created['id']}", headers=ADMIN_HEADERS).json()
        assert fetched["name"] == "Ana García"
        assert fetched["email"] == "ana@example.com"

    def test_edit_accepts_null_optional_field(self, client):
        created = _create(client, notes="Old note")

        response = client.put(
            f"/reservations/{created['id']}",
            json={"notes": None},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["notes"] is None

    def test_get_and_edit(self, client):
        created = _create(client)

        response = client.put(
            f"/reservations/{created['id']}",
            json={"phone": "+34 611 111 111", "notes": "Prefers email"},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 200

        fetched = client.get(f"/reservations/{created['id']}", headers=ADMIN_HEADERS).json()
        assert fetched["phone"] == "+34 611 111 111"
        assert fetched["notes"] == "Prefers email"
        assert fetched["timeSlot"] == "10:15"

    def test_status_lifecycle(self, client, notifier):
        created = _create(client)
        base = f"/reservations/{created['id']}"

        confirmed = client.put(f"{base}/confirm", headers=ADMIN_HEADERS)
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "confirmed"

        repeated = client.put(f"{base}/confirm", headers=ADMIN_HEADERS)
        assert repeated.status_code == 409
        assert repeated.json()["code"] == "illegal_transition"

        completed = client.put(f"{base}/complete", headers=ADMIN_HEADERS)
        assert completed.json()["status"] == "completed"

        assert [event for event, _ in notifier.events] == [
            "reservation_created",
            "reservation_confirmed",
            "reservation_completed",
        ]

    def test_cancel_with_reason_frees_slot(self, client):
        created = _create(client)

        response = client.put(
            f"/reservations/{created['id']}/cancel",
            json={"reason": "Client called"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancelReason"] == "Client called"

        again = _create(client, email="next@example.com")
        assert again["id"] != created["id"]

    def test_cancel_without_body(self, client):
        created = _create(client)
        response = client.put(f"/reservations/{created['id']}/cancel", headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert response.json()["cancelReason"] is None

    def test_unknown_reservation(self, client):
        response = client.put("/reservations/999/confirm", headers=ADMIN_HEADERS)
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

        assert client.get("/reservations/999", headers=ADMIN_HEADERS).status_code == 404

    def test_delete_not_allowed(self, client):
        created = _create(client)
        response = client.delete(f"/reservations/{created['id']}", headers=ADMIN_HEADERS)

        assert response.status_code == 405
        fetched = client.get(f"/reservations/{created['id']}", headers=ADMIN_HEADERS)
        assert fetched.json()["status"] == "pending"


class TestHealth:

    def test_health_without_redis(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"database": True, "redis": None}


class TestLifespan:

    def test_shutdown_closes_own_notifier(self, database_url, clock, monkeypatch):
        closed = []
        monkeypatch.setattr(BookingNotifier, "close", lambda self: closed.append(self))

        app = create_app(Settings(database_url=database_url, redis_url=None), clock=clock)
        with TestClient(app):
            notifier = app.state.notifier
            assert isinstance(notifier, BookingNotifier)

        assert closed == [notifier]


class TestSettingsBounds:

    def test_oversized_horizon_rejected_and_slots_still_served(self, client):
        response = client.put(
            "/reservation-settings",
            json={"maxAdvanceDays": 3000000},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 400
        assert "maxAdvanceDays" in response.json()["errors"]

        slots = client.get(f"/reservations/available-slots/{NEXT_MONDAY.isoformat()}")
        assert slots.status_code == 200
        assert slots.json()["availableSlots"] == DEFAULT_GRID
