"""Tests for the in-memory (local-only) backend."""

import datetime

import pytest

from club.backend.base import (BOOKINGS, CLASS_SESSIONS, MODALITIES, PROFILES, BackendError,
                               CapacityBelowConfirmed, CapacityExceeded, CredentialAlreadyExists, RecordNotFound, )
from club.backend.fixtures import FIXTURE_PASSWORD
from club.backend.memory import MemoryBackend

from conftest import NOW


def _booking(session_id: str, user_id: str, status: str = "CONFIRMED") -> dict:
    return {"session_id": session_id, "user_id": user_id, "status": status, "booked_at": NOW}


# ======================================================================
# Fixtures
# ======================================================================


class TestFixtures:
    def test_seeded_tables(self, backend):
        assert len(backend.fetch_all(PROFILES)) == 3
        assert len(backend.fetch_all(MODALITIES)) == 3
        assert {s["id"] for s in backend.fetch_all(CLASS_SESSIONS)} == {"s1", "s2", "s3", "s4"}
        assert [b["id"] for b in backend.fetch_all(BOOKINGS)] == ["b1"]

    def test_sessions_placed_relative_to_now(self, backend):
        starts = {s["id"]: s["start_time"] for s in backend.fetch_all(CLASS_SESSIONS)}
        assert starts["s1"].date() == NOW.date()
        assert starts["s3"].date() == NOW.date() + datetime.timedelta(days=1)

    def test_demo_logins(self, backend):
        assert backend.credentials.sign_in("admin@clube.com", FIXTURE_PASSWORD) == "1"
        assert backend.credentials.sign_in("admin@clube.com", "wrong") is None

    def test_ping(self, backend):
        backend.ping()


# ======================================================================
# Rows
# ======================================================================


class TestRows:
    def test_rows_are_copies(self, backend):
        row = backend.find_one(PROFILES, "id", "2")
        row["name"] = "changed"
        assert backend.find_one(PROFILES, "id", "2")["name"] == "João Silva"

    def test_insert_generates_id(self, backend):
        row = backend.insert(MODALITIES, {"name": "Vôlei", "description": "", "image_url": ""})
        assert row["id"]
        assert backend.find_one(MODALITIES, "id", row["id"])["name"] == "Vôlei"

    def test_duplicate_email_rejected(self, backend):
        with pytest.raises(BackendError):
            backend.insert(PROFILES, {"name": "Outro", "email": "aluno@clube.com", "role": "STUDENT"})

    def test_update_merges(self, backend):
        updated = backend.update(PROFILES, "2", {"phone": "11900000000"})
        assert updated["phone"] == "11900000000"
        assert updated["email"] == "aluno@clube.com"

    def test_update_missing(self, backend):
        with pytest.raises(RecordNotFound):
            backend.update(PROFILES, "nope", {"name": "x"})

    def test_unknown_table(self, backend):
        with pytest.raises(BackendError):
            backend.fetch_all("payments")

    def test_delete_session_cascades_bookings(self, backend):
        backend.delete(CLASS_SESSIONS, "s1")
        assert backend.find_one(CLASS_SESSIONS, "id", "s1") is None
        assert backend.find_one(BOOKINGS, "id", "b1") is None

    def test_delete_missing(self, backend):
        with pytest.raises(RecordNotFound):
            backend.delete(BOOKINGS, "nope")


# ======================================================================
# Capacity
# ======================================================================


class TestCapacity:
    def test_fills_up_to_capacity(self, backend):
        # s1 has capacity 5 and one booking already
        for i in range(4):
            backend.insert(BOOKINGS, _booking("s1", f"u{i}"))
        with pytest.raises(CapacityExceeded):
            backend.insert(BOOKINGS, _booking("s1", "late"))

    def test_cancelled_bookings_do_not_count(self, backend):
        backend.update(BOOKINGS, "b1", {"status": "CANCELLED_BY_STUDENT"})
        for i in range(5):
            backend.insert(BOOKINGS, _booking("s1", f"u{i}"))

    def test_non_confirmed_insert_skips_check(self, backend):
        for i in range(4):
            backend.insert(BOOKINGS, _booking("s1", f"u{i}"))
        backend.insert(BOOKINGS, _booking("s1", "history", status="ATTENDED"))

    def test_missing_session(self, backend):
        with pytest.raises(RecordNotFound):
            backend.insert(BOOKINGS, _booking("ghost", "2"))

    def test_capacity_cannot_drop_below_confirmed(self, backend):
        backend.insert(BOOKINGS, _booking("s1", "u0"))
        with pytest.raises(CapacityBelowConfirmed) as exc_info:
            backend.update(CLASS_SESSIONS, "s1", {"capacity": 1})
        assert exc_info.value.confirmed == 2
        assert backend.find_one(CLASS_SESSIONS, "id", "s1")["capacity"] == 5

    def test_capacity_can_shrink_to_confirmed(self, backend):
        backend.insert(BOOKINGS, _booking("s1", "u0"))
        assert backend.update(CLASS_SESSIONS, "s1", {"capacity": 2})["capacity"] == 2


# ======================================================================
# Credentials
# ======================================================================


class TestMemoryCredentials:
    def test_sign_up_and_in(self):
        backend = MemoryBackend()
        user_id = backend.credentials.sign_up("novo@clube.com", "segredo1")
        assert backend.credentials.sign_in("novo@clube.com", "segredo1") == user_id

    def test_sign_up_twice(self):
        backend = MemoryBackend()
        backend.credentials.sign_up("novo@clube.com", "segredo1")
        with pytest.raises(CredentialAlreadyExists):
            backend.credentials.sign_up("novo@clube.com", "outra123")

    def test_update_password(self):
        backend = MemoryBackend()
        user_id = backend.credentials.sign_up("novo@clube.com", "segredo1")
        backend.credentials.update_password(user_id, "nova1234")
        assert backend.credentials.sign_in("novo@clube.com", "segredo1") is None
        assert backend.credentials.sign_in("novo@clube.com", "nova1234") == user_id

    def test_update_password_unknown_user(self):
        with pytest.raises(RecordNotFound):
            MemoryBackend().credentials.update_password("ghost", "nova1234")
