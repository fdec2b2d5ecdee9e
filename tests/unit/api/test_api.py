"""HTTP API tests.

The application runs without its lifespan: the test store (demo club,
frozen clock) is placed on ``app.state`` directly.
"""

import pytest
from fastapi.testclient import TestClient

from club.backend.fixtures import FIXTURE_PASSWORD
from club.main import app

API = "/api/v1"


@pytest.fixture
def client(store):
    app.state.store = store
    yield TestClient(app)
    app.state.store = None


def _login(client: TestClient, identifier: str, password: str = FIXTURE_PASSWORD) -> dict:
    response = client.post(f"{API}/auth/token", json={"identifier": identifier, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin(client) -> dict:
    return _login(client, "admin@clube.com")


@pytest.fixture
def student(client) -> dict:
    return _login(client, "aluno@clube.com")


# ======================================================================
# Service endpoints
# ======================================================================


class TestService:
    def test_root(self, client):
        assert client.get("/").json()["status"] == "healthy"

    def test_health_reports_backend(self, client):
        body = client.get("/health").json()
        assert body["backend"] == "memory"
        assert body["scheduler"] == "not_initialized"


# ======================================================================
# Authentication
# ======================================================================


class TestAuth:
    def test_oauth2_form_login(self, client):
        response = client.post(f"{API}/auth/login", data={"username": "11999998888", "password": FIXTURE_PASSWORD})
        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"

    def test_bad_credentials(self, client):
        response = client.post(f"{API}/auth/token", json={"identifier": "aluno@clube.com", "password": "x"})
        assert response.status_code == 401

    def test_me(self, client, student):
        body = client.get(f"{API}/auth/me", headers=student).json()
        assert body["user"]["email"] == "aluno@clube.com"
        assert body["user"]["planType"] == "Mensalista"
        assert body["roleLabel"] == "Aluno"
        assert body["homePath"] == "/student"

    def test_admin_home(self, client, admin):
        body = client.get(f"{API}/auth/me", headers=admin).json()
        assert body["roleLabel"] == "Administrador"
        assert body["homePath"] == "/admin"

    def test_missing_token(self, client):
        assert client.get(f"{API}/sessions").status_code == 401

    def test_invalid_token(self, client):
        response = client.get(f"{API}/sessions", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_logout(self, client, student):
        assert client.post(f"{API}/auth/logout", headers=student).status_code == 204

    def test_password_reset_request(self, client):
        response = client.post(f"{API}/auth/password/reset", json={"email": "aluno@clube.com"})
        assert response.status_code == 202

    def test_first_login_requires_password_change(self, client, admin):
        created = client.post(f"{API}/users/students", headers=admin,
                              json={"name": "Rita Lima", "phone": "11933334444"})
        assert created.status_code == 201
        email = created.json()["user"]["email"]
        assert email == "rita.lima.4444@clubesport.local"

        headers = _login(client, email, "mudar@123")
        assert client.get(f"{API}/sessions/browse", headers=headers).status_code == 403
        assert client.get(f"{API}/auth/me", headers=headers).json()["user"]["mustChangePassword"] is True

        changed = client.post(f"{API}/auth/password", headers=headers, json={"newPassword": "minhasenha"})
        assert changed.status_code == 200
        assert changed.json()["mustChangePassword"] is False
        assert client.get(f"{API}/sessions/browse", headers=headers).status_code == 200


# ======================================================================
# Modalities and sessions
# ======================================================================


class TestModalities:
    def test_list(self, client, student):
        assert len(client.get(f"{API}/modalities", headers=student).json()) == 3

    def test_student_cannot_create(self, client, student):
        response = client.post(f"{API}/modalities", headers=student, json={"name": "Vôlei"})
        assert response.status_code == 403

    def test_admin_lifecycle(self, client, admin):
        created = client.post(f"{API}/modalities", headers=admin, json={"name": "Vôlei", "description": "Quadra"})
        assert created.status_code == 201
        modality_id = created.json()["id"]
        assert created.json()["imageUrl"]

        updated = client.put(f"{API}/modalities/{modality_id}", headers=admin, json={"description": "Areia"})
        assert updated.json()["description"] == "Areia"

        assert client.delete(f"{API}/modalities/{modality_id}", headers=admin).status_code == 204

    def test_delete_referenced(self, client, admin):
        assert client.delete(f"{API}/modalities/m1", headers=admin).status_code == 409

    def test_image_upload(self, client, admin):
        response = client.post(f"{API}/modalities/m2/image", headers=admin,
                               files={"image": ("capa.png", b"\x89PNG", "image/png")})
        assert response.status_code == 200


class TestSessions:
    def test_list_filtered(self, client, student):
        sessions = client.get(f"{API}/sessions", headers=student, params={"modality_id": "m2"}).json()
        assert {s["id"] for s in sessions} == {"s2", "s4"}

    def test_list_by_date(self, client, student):
        sessions = client.get(f"{API}/sessions", headers=student, params={"start": "2026-03-11"}).json()
        assert [s["id"] for s in sessions] == ["s3"]

    def test_browse(self, client, student):
        rows = client.get(f"{API}/sessions/browse", headers=student).json()
        assert [r["session"]["id"] for r in rows] == ["s1", "s2", "s4", "s3"]
        assert rows[0]["confirmedCount"] == 1
        assert rows[0]["occupancy"] == "LOW"
        assert rows[0]["locked"] is False

    def test_create(self, client, admin):
        response = client.post(f"{API}/sessions", headers=admin,
                               json={"modalityId": "m1", "instructor": "Prof. Carlos",
                                     "startTime": "2026-03-12T07:00:00", "capacity": 8})
        assert response.status_code == 201
        assert response.json()["startTime"].startswith("2026-03-12T07:00:00-03:00")

    def test_create_invalid_capacity(self, client, admin):
        response = client.post(f"{API}/sessions", headers=admin,
                               json={"modalityId": "m1", "startTime": "2026-03-12T07:00:00", "capacity": 0})
        assert response.status_code == 422

    def test_update_and_delete(self, client, admin):
        assert client.put(f"{API}/sessions/s2", headers=admin, json={"capacity": 4}).json()["capacity"] == 4
        assert client.delete(f"{API}/sessions/s1", headers=admin).status_code == 204
        assert client.get(f"{API}/sessions/s1/bookings/count", headers=admin).json()["confirmed"] == 0

    def test_capacity_below_bookings(self, client, admin, student):
        response = client.put(f"{API}/sessions/s1", headers=admin, json={"capacity": 0})
        assert response.status_code == 422
        booked = client.post(f"{API}/bookings", headers=student, json={"sessionId": "s1"})
        assert booked.status_code == 201
        response = client.put(f"{API}/sessions/s1", headers=admin, json={"capacity": 1})
        assert response.status_code == 409

    def test_generate_requires_confirmation_for_large_batches(self, client, admin):
        payload = {"spec": {"modalityId": "m2", "instructor": "Prof. Ana", "capacity": 10,
                            "startDate": "2026-03-15", "timesOfDay": ["07:00", "18:00"],
                            "daysOfWeek": [0, 1, 2, 3, 4, 5, 6], "weeksToRepeat": 4}}
        first = client.post(f"{API}/sessions/generate", headers=admin, json=payload)
        assert first.status_code == 409

        confirmed = client.post(f"{API}/sessions/generate", headers=admin, json={**payload, "confirm": True})
        assert confirmed.status_code == 201
        assert confirmed.json()["created"] == 56

    def test_generate_invalid_spec(self, client, admin):
        payload = {"spec": {"modalityId": "m2", "startDate": "2026-03-15", "timesOfDay": [], "daysOfWeek": [1]}}
        assert client.post(f"{API}/sessions/generate", headers=admin, json=payload).status_code == 422

    def test_bookings_count(self, client, student):
        assert client.get(f"{API}/sessions/s1/bookings/count", headers=student).json()["confirmed"] == 1


# ======================================================================
# Bookings
# ======================================================================


class TestBookings:
    def test_book_and_cancel(self, client, student):
        booked = client.post(f"{API}/bookings", headers=student, json={"sessionId": "s2"})
        assert booked.status_code == 201
        booking_id = booked.json()["id"]
        assert booked.json()["status"] == "CONFIRMED"

        mine = client.get(f"{API}/bookings/me", headers=student).json()
        assert [b["id"] for b in mine] == [booking_id]

        again = client.post(f"{API}/bookings", headers=student, json={"sessionId": "s2"})
        assert again.status_code == 409
        assert again.headers["X-Rejection-Reason"] == "ALREADY_BOOKED"

        assert client.delete(f"{API}/bookings/{booking_id}", headers=student).status_code == 204
        assert client.get(f"{API}/bookings/me", headers=student).json() == []

    def test_locked_before_release_hour(self, client, student, clock):
        clock.now = clock.now.replace(hour=7)
        response = client.post(f"{API}/bookings", headers=student, json={"sessionId": "s3"})
        assert response.status_code == 403
        assert response.headers["X-Rejection-Reason"] == "LOCKED"

    def test_cannot_cancel_others(self, client, student):
        assert client.delete(f"{API}/bookings/b1", headers=student).status_code == 403

    def test_list_all_staff_only(self, client, student, admin):
        assert client.get(f"{API}/bookings", headers=student).status_code == 403
        all_bookings = client.get(f"{API}/bookings", headers=admin, params={"session_id": "s1"}).json()
        assert [b["id"] for b in all_bookings] == ["b1"]


# ======================================================================
# Members and settings
# ======================================================================


class TestUsers:
    def test_list_active(self, client, admin):
        users = client.get(f"{API}/users", headers=admin, params={"role": "STUDENT"}).json()
        assert {u["id"] for u in users} == {"2", "3"}

    def test_students_cannot_list(self, client, student):
        assert client.get(f"{API}/users", headers=student).status_code == 403

    def test_deactivate_and_reactivate(self, client, admin):
        assert client.delete(f"{API}/users/3", headers=admin).status_code == 204
        users = client.get(f"{API}/users", headers=admin).json()
        assert "3" not in {u["id"] for u in users}

        response = client.post(f"{API}/users/students", headers=admin,
                               json={"name": "Maria O.", "phone": "11977776666", "email": "maria@clube.com"})
        assert response.status_code == 201
        assert response.json()["reactivated"] is True

    def test_register_active_conflict(self, client, admin):
        response = client.post(f"{API}/users/students", headers=admin,
                               json={"name": "João", "phone": "11999998888", "email": "aluno@clube.com"})
        assert response.status_code == 409

    def test_register_teacher(self, client, admin):
        response = client.post(f"{API}/users/teachers", headers=admin, json={"name": "Rui", "phone": "11922223333"})
        assert response.json()["user"]["role"] == "TEACHER"

    def test_update(self, client, admin):
        response = client.put(f"{API}/users/2", headers=admin, json={"observation": "Horário flexível"})
        assert response.json()["observation"] == "Horário flexível"

    def test_update_cannot_change_role(self, client, admin):
        response = client.put(f"{API}/users/2", headers=admin, json={"role": "INACTIVE", "name": "João S."})
        assert response.json()["role"] == "STUDENT"
        assert response.json()["name"] == "João S."

    def test_password_reset(self, client, admin):
        assert client.post(f"{API}/users/2/password-reset", headers=admin).status_code == 202


class TestSettings:
    def test_get(self, client, student):
        assert client.get(f"{API}/settings/booking-release-hour", headers=student).json() == {"hour": 8}

    def test_update(self, client, admin, store):
        response = client.put(f"{API}/settings/booking-release-hour", headers=admin, json={"hour": 10})
        assert response.json() == {"hour": 10}
        assert store.booking_release_hour == 10

    def test_out_of_range(self, client, admin):
        response = client.put(f"{API}/settings/booking-release-hour", headers=admin, json={"hour": 24})
        assert response.status_code == 422

    def test_student_cannot_update(self, client, student):
        response = client.put(f"{API}/settings/booking-release-hour", headers=student, json={"hour": 6})
        assert response.status_code == 403
