"""
In-memory backend for local-only mode.

Used when no database is configured or reachable.  Tables are plain
dicts of rows guarded by a lock; the same capacity rule and unique-email
rule as the relational backend apply.  Everything is lost when the
process exits.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Iterable, Optional

from club.backend.base import (BOOKINGS, CLASS_SESSIONS, PROFILES, TABLES, Backend, BackendError,
                               CapacityBelowConfirmed, CapacityExceeded, CredentialAlreadyExists, CredentialService,
                               RecordNotFound, Row, new_id, )
from club.core.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)


class MemoryCredentialService(CredentialService):
    """Credentials kept as ``{email: (user_id, bcrypt hash)}``."""

    def __init__(self):
        self._lock = threading.RLock()
        self._by_email: dict[str, tuple[str, str]] = {}

    def add(self, user_id: str, email: str, password: str) -> None:
        with self._lock:
            self._by_email[email] = (user_id, get_password_hash(password))

    def sign_up(self, email: str, password: str) -> str:
        with self._lock:
            if email in self._by_email:
                raise CredentialAlreadyExists(email)
            user_id = new_id()
            self._by_email[email] = (user_id, get_password_hash(password))
            return user_id

    def sign_in(self, email: str, password: str) -> Optional[str]:
        with self._lock:
            entry = self._by_email.get(email)
        if entry and verify_password(password, entry[1]):
            return entry[0]
        return None

    def sign_out(self, user_id: str) -> None:
        logger.debug("User %s signed out", user_id)

    def update_password(self, user_id: str, password: str) -> None:
        with self._lock:
            for email, (owner, _) in self._by_email.items():
                if owner == user_id:
                    self._by_email[email] = (owner, get_password_hash(password))
                    return
        raise RecordNotFound("credentials", user_id)

    def send_reset_email(self, email: str) -> None:
        logger.info("Password reset requested for %s (local-only mode, nothing sent)", email)


class MemoryBackend(Backend):
    """Backend holding every table in process memory."""

    name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._tables: dict[str, dict[str, Row]] = {table: {} for table in TABLES}
        self.credentials = MemoryCredentialService()

    @classmethod
    def with_fixtures(cls, now=None) -> "MemoryBackend":
        """Backend seeded with the demo club (see :mod:`club.backend.fixtures`)."""
        from club.backend import fixtures

        backend = cls()
        backend.load(fixtures.fixture_rows(now))
        for user_id, email, password in fixtures.fixture_logins():
            backend.credentials.add(user_id, email, password)
        return backend

    def load(self, rows_by_table: dict[str, Iterable[Row]]) -> None:
        with self._lock:
            for table, rows in rows_by_table.items():
                for row in rows:
                    self._table(table)[row["id"]] = copy.deepcopy(row)

    def _table(self, table: str) -> dict[str, Row]:
        try:
            return self._tables[table]
        except KeyError:
            raise BackendError(f"unknown table: {table}") from None

    def ping(self) -> None:
        return None

    def fetch_all(self, table: str) -> list[Row]:
        with self._lock:
            return [copy.deepcopy(row) for row in self._table(table).values()]

    def find_one(self, table: str, field: str, value: Any) -> Optional[Row]:
        with self._lock:
            for row in self._table(table).values():
                if row.get(field) == value:
                    return copy.deepcopy(row)
        return None

    def _check_unique_email(self, row: Row, row_id: str) -> None:
        email = row.get("email")
        for other in self._tables[PROFILES].values():
            if other["id"] != row_id and other.get("email") == email:
                raise BackendError(f"duplicate email: {email}")

    def insert(self, table: str, row: Row) -> Row:
        with self._lock:
            rows = self._table(table)
            data = copy.deepcopy(row)
            data.setdefault("id", new_id())
            if data["id"] in rows:
                raise BackendError(f"duplicate id in {table}: {data['id']}")
            if table == PROFILES:
                self._check_unique_email(data, data["id"])
            if table == BOOKINGS and data.get("status") == "CONFIRMED":
                self._check_capacity(data["session_id"])
            rows[data["id"]] = data
            return copy.deepcopy(data)

    def _confirmed(self, session_id: str) -> int:
        return sum(1 for b in self._tables[BOOKINGS].values()
                   if b["session_id"] == session_id and b["status"] == "CONFIRMED")

    def _check_capacity(self, session_id: str) -> None:
        class_session = self._tables[CLASS_SESSIONS].get(session_id)
        if class_session is None:
            raise RecordNotFound(CLASS_SESSIONS, session_id)
        if self._confirmed(session_id) >= class_session["capacity"]:
            raise CapacityExceeded(session_id)

    def update(self, table: str, row_id: str, changes: Row) -> Row:
        with self._lock:
            rows = self._table(table)
            if row_id not in rows:
                raise RecordNotFound(table, row_id)
            updated = {**rows[row_id], **copy.deepcopy(changes), "id": row_id}
            if table == PROFILES:
                self._check_unique_email(updated, row_id)
            elif table == CLASS_SESSIONS and "capacity" in changes:
                confirmed = self._confirmed(row_id)
                if updated["capacity"] < confirmed:
                    raise CapacityBelowConfirmed(row_id, confirmed)
            rows[row_id] = updated
            return copy.deepcopy(updated)

    def delete(self, table: str, row_id: str) -> None:
        with self._lock:
            rows = self._table(table)
            if row_id not in rows:
                raise RecordNotFound(table, row_id)
            del rows[row_id]
            if table == CLASS_SESSIONS:
                bookings = self._tables[BOOKINGS]
                for booking_id in [k for k, b in bookings.items() if b["session_id"] == row_id]:
                    del bookings[booking_id]
