"""Tests for the relational backend on an in-memory SQLite database."""

import datetime

import pytest

from fastapi import HTTPException

from club.backend.base import (BOOKINGS, CLASS_SESSIONS, MODALITIES, PROFILES, BackendError,
                               CapacityBelowConfirmed, CapacityExceeded, CredentialAlreadyExists, RecordNotFound, )
from club.backend.fixtures import fixture_rows
from club.backend.sql import SqlBackend
from club.db.session import build_engine
from club.models.credential import Credential
from club.schemas.class_session import ClassSessionUpdate
from club.schemas.user import UserRegistration
from club.services.club_store import ClubStore

from conftest import CLUB_TZ, NOW


@pytest.fixture
def sql_backend() -> SqlBackend:
    backend = SqlBackend(build_engine("sqlite://"))
    backend.create_tables()
    backend.insert(PROFILES, {"id": "u1", "name": "Ana", "email": "ana@clube.com", "role": "STUDENT"})
    backend.insert(PROFILES, {"id": "u2", "name": "Bia", "email": "bia@clube.com", "role": "STUDENT"})
    backend.insert(PROFILES, {"id": "u3", "name": "Caio", "email": "caio@clube.com", "role": "STUDENT"})
    backend.insert(MODALITIES, {"id": "m1", "name": "Natação", "description": "", "image_url": ""})
    backend.insert(CLASS_SESSIONS, {"id": "s1", "modality_id": "m1", "instructor": "Prof. Carlos",
                                    "start_time": NOW + datetime.timedelta(hours=2), "duration_minutes": 60,
                                    "capacity": 2, "category": None})
    return backend


@pytest.fixture
def demo_sql_backend() -> SqlBackend:
    """The demo club loaded into a fresh SQLite database."""
    backend = SqlBackend(build_engine("sqlite://"))
    backend.create_tables()
    rows = fixture_rows(NOW)
    for table in (PROFILES, MODALITIES, CLASS_SESSIONS, BOOKINGS):
        for row in rows[table]:
            backend.insert(table, row)
    return backend


def _sql_store(backend: SqlBackend, clock) -> ClubStore:
    club_store = ClubStore(backend, timezone=CLUB_TZ, clock=clock)
    club_store.refresh()
    return club_store


def _booking(user_id: str, session_id: str = "s1", status: str = "CONFIRMED") -> dict:
    return {"session_id": session_id, "user_id": user_id, "status": status, "booked_at": NOW}


# ======================================================================
# Rows
# ======================================================================


class TestRows:
    def test_ping(self, sql_backend):
        sql_backend.ping()

    def test_fetch_all(self, sql_backend):
        assert {p["id"] for p in sql_backend.fetch_all(PROFILES)} == {"u1", "u2", "u3"}

    def test_find_one(self, sql_backend):
        assert sql_backend.find_one(PROFILES, "email", "bia@clube.com")["id"] == "u2"
        assert sql_backend.find_one(PROFILES, "email", "nobody@clube.com") is None

    def test_start_time_round_trips_as_utc_instant(self, sql_backend):
        row = sql_backend.find_one(CLASS_SESSIONS, "id", "s1")
        assert row["start_time"].tzinfo is not None
        assert row["start_time"] == NOW + datetime.timedelta(hours=2)

    def test_insert_generates_id(self, sql_backend):
        row = sql_backend.insert(MODALITIES, {"name": "Judô", "description": "", "image_url": ""})
        assert row["id"]

    def test_duplicate_email(self, sql_backend):
        with pytest.raises(BackendError):
            sql_backend.insert(PROFILES, {"name": "Ana 2", "email": "ana@clube.com", "role": "STUDENT"})

    def test_update(self, sql_backend):
        row = sql_backend.update(PROFILES, "u1", {"role": "INACTIVE", "previous_role": "STUDENT"})
        assert row["role"] == "INACTIVE"
        assert row["previous_role"] == "STUDENT"

    def test_update_missing(self, sql_backend):
        with pytest.raises(RecordNotFound):
            sql_backend.update(PROFILES, "ghost", {"name": "x"})

    def test_delete_missing(self, sql_backend):
        with pytest.raises(RecordNotFound):
            sql_backend.delete(MODALITIES, "ghost")

    def test_delete_session_cascades_bookings(self, sql_backend):
        sql_backend.insert(BOOKINGS, _booking("u1"))
        sql_backend.delete(CLASS_SESSIONS, "s1")
        assert sql_backend.fetch_all(BOOKINGS) == []

    def test_unknown_table(self, sql_backend):
        with pytest.raises(BackendError):
            sql_backend.fetch_all("payments")


# ======================================================================
# Capacity
# ======================================================================


class TestCapacity:
    def test_rejects_beyond_capacity(self, sql_backend):
        sql_backend.insert(BOOKINGS, _booking("u1"))
        sql_backend.insert(BOOKINGS, _booking("u2"))
        with pytest.raises(CapacityExceeded):
            sql_backend.insert(BOOKINGS, _booking("u3"))
        assert len(sql_backend.fetch_all(BOOKINGS)) == 2

    def test_cancelled_bookings_free_the_seat(self, sql_backend):
        first = sql_backend.insert(BOOKINGS, _booking("u1"))
        sql_backend.insert(BOOKINGS, _booking("u2"))
        sql_backend.update(BOOKINGS, first["id"], {"status": "CANCELLED_BY_STUDENT"})
        sql_backend.insert(BOOKINGS, _booking("u3"))

    def test_missing_session(self, sql_backend):
        with pytest.raises(RecordNotFound):
            sql_backend.insert(BOOKINGS, _booking("u1", session_id="ghost"))

    def test_capacity_cannot_drop_below_confirmed(self, sql_backend):
        sql_backend.insert(BOOKINGS, _booking("u1"))
        sql_backend.insert(BOOKINGS, _booking("u2"))
        with pytest.raises(CapacityBelowConfirmed) as exc_info:
            sql_backend.update(CLASS_SESSIONS, "s1", {"capacity": 1})
        assert exc_info.value.confirmed == 2
        assert sql_backend.find_one(CLASS_SESSIONS, "id", "s1")["capacity"] == 2

    def test_capacity_can_grow_and_shrink_to_confirmed(self, sql_backend):
        sql_backend.insert(BOOKINGS, _booking("u1"))
        assert sql_backend.update(CLASS_SESSIONS, "s1", {"capacity": 4})["capacity"] == 4
        assert sql_backend.update(CLASS_SESSIONS, "s1", {"capacity": 1})["capacity"] == 1


# ======================================================================
# Credentials
# ======================================================================


class TestSqlCredentials:
    def test_sign_up_and_in(self, sql_backend):
        user_id = sql_backend.credentials.sign_up("novo@clube.com", "segredo1")
        assert sql_backend.credentials.sign_in("novo@clube.com", "segredo1") == user_id
        assert sql_backend.credentials.sign_in("novo@clube.com", "errada") is None
        assert sql_backend.credentials.sign_in("ninguem@clube.com", "segredo1") is None

    def test_sign_up_twice(self, sql_backend):
        sql_backend.credentials.sign_up("novo@clube.com", "segredo1")
        with pytest.raises(CredentialAlreadyExists):
            sql_backend.credentials.sign_up("novo@clube.com", "segredo2")

    def test_update_password(self, sql_backend):
        user_id = sql_backend.credentials.sign_up("novo@clube.com", "segredo1")
        sql_backend.credentials.update_password(user_id, "nova1234")
        assert sql_backend.credentials.sign_in("novo@clube.com", "nova1234") == user_id

    def test_update_password_unknown(self, sql_backend):
        with pytest.raises(RecordNotFound):
            sql_backend.credentials.update_password("ghost", "nova1234")

    def test_timestamps_are_timezone_aware(self):
        credential = Credential(user_id="u9", email="novo@clube.com", hashed_password="x")
        assert credential.created_at.tzinfo is not None
        assert credential.updated_at.tzinfo is not None


# ======================================================================
# Store facade over the relational backend
# ======================================================================


class TestSqlClubStore:
    def test_register_and_login(self, demo_sql_backend, clock):
        store = _sql_store(demo_sql_backend, clock)
        result = store.register_student(UserRegistration(name="Ana Souza", phone="11987654321"))
        assert result.user.must_change_password is True

        assert store.login("11987654321", "mudar@123").access_token
        user = store.update_password(result.user, "minhasenha")
        assert user.must_change_password is False
        assert store.login(result.user.email, "minhasenha").access_token

    def test_stale_snapshot_loses_last_seat(self, demo_sql_backend, clock):
        first = _sql_store(demo_sql_backend, clock)
        second = _sql_store(demo_sql_backend, clock)
        # s1: capacity 5, b1 already confirmed
        for i in range(3):
            demo_sql_backend.insert(PROFILES, {"id": f"f{i}", "name": f"Filler {i}", "email": f"f{i}@clube.com",
                                               "role": "STUDENT"})
            demo_sql_backend.insert(BOOKINGS, {"session_id": "s1", "user_id": f"f{i}", "status": "CONFIRMED",
                                               "booked_at": NOW})
        first.refresh()
        second.refresh()
        # Both see 4/5

        first.book_session(first.get_user("2"), "s1")
        with pytest.raises(HTTPException) as exc_info:
            second.book_session(second.get_user("1"), "s1")
        assert exc_info.value.headers["X-Rejection-Reason"] == "FULL"
        assert second.get_session_bookings_count("s1") == 5
        confirmed = [b for b in demo_sql_backend.fetch_all(BOOKINGS)
                     if b["session_id"] == "s1" and b["status"] == "CONFIRMED"]
        assert len(confirmed) == 5

    def test_stale_snapshot_cannot_shrink_below_bookings(self, demo_sql_backend, clock):
        first = _sql_store(demo_sql_backend, clock)
        second = _sql_store(demo_sql_backend, clock)
        first.book_session(first.get_user("2"), "s1")

        # second still sees only b1 on s1
        with pytest.raises(HTTPException) as exc_info:
            second.update_session("s1", ClassSessionUpdate(capacity=1))
        assert exc_info.value.status_code == 409
        assert second.entities.get_session("s1").capacity == 5
