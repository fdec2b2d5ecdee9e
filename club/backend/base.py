"""
Backend collaborator interface.

The club's durable state lives behind this interface: four resource
collections (``profiles``, ``modalities``, ``class_sessions``,
``bookings``) exchanged as flat snake_case rows, and a credential
service.  :class:`club.backend.sql.SqlBackend` talks to a relational
database; :class:`club.backend.memory.MemoryBackend` keeps everything in
process for local-only mode.  Both enforce the booking capacity rule.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any, Optional

PROFILES = "profiles"
MODALITIES = "modalities"
CLASS_SESSIONS = "class_sessions"
BOOKINGS = "bookings"

TABLES = (PROFILES, MODALITIES, CLASS_SESSIONS, BOOKINGS)

Row = dict[str, Any]


def new_id() -> str:
    return str(uuid.uuid4())


# ======================================================================
# Errors
# ======================================================================


class BackendError(Exception):
    """The backend could not complete the request."""


class RecordNotFound(BackendError):
    def __init__(self, table: str, row_id: str):
        super().__init__(f"{table}/{row_id} not found")
        self.table = table
        self.row_id = row_id


class CapacityExceeded(BackendError):
    """A CONFIRMED booking would exceed the session capacity."""

    def __init__(self, session_id: str):
        super().__init__(f"class session {session_id} is full")
        self.session_id = session_id


class CapacityBelowConfirmed(BackendError):
    """A session capacity update would leave more CONFIRMED bookings than seats."""

    def __init__(self, session_id: str, confirmed: Optional[int] = None):
        super().__init__(f"class session {session_id} has more confirmed bookings than seats")
        self.session_id = session_id
        self.confirmed = confirmed


class CredentialAlreadyExists(BackendError):
    """A login already exists for this email."""

    def __init__(self, email: str):
        super().__init__(f"{email} already registered")
        self.email = email


# ======================================================================
# Interfaces
# ======================================================================


class CredentialService(ABC):
    """Sign-in/sign-up surface of the auth provider."""

    @abstractmethod
    def sign_up(self, email: str, password: str) -> str:
        """Create a login and return the new user id.

        Raises:
            CredentialAlreadyExists: If *email* already has a login.
        """

    @abstractmethod
    def sign_in(self, email: str, password: str) -> Optional[str]:
        """Return the user id when the credentials match, ``None`` otherwise."""

    @abstractmethod
    def sign_out(self, user_id: str) -> None:
        ...

    @abstractmethod
    def update_password(self, user_id: str, password: str) -> None:
        ...

    @abstractmethod
    def send_reset_email(self, email: str) -> None:
        ...


class Backend(ABC):
    """Row-level access to the club tables."""

    name: str = "backend"
    credentials: CredentialService

    @abstractmethod
    def ping(self) -> None:
        """Raise :class:`BackendError` when the backend is unreachable."""

    @abstractmethod
    def fetch_all(self, table: str) -> list[Row]:
        ...

    @abstractmethod
    def find_one(self, table: str, field: str, value: Any) -> Optional[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        """Insert *row* (an ``id`` is generated when missing) and return it.

        Raises:
            CapacityExceeded: For a CONFIRMED booking on a full session.
        """

    @abstractmethod
    def update(self, table: str, row_id: str, changes: Row) -> Row:
        ...

    @abstractmethod
    def delete(self, table: str, row_id: str) -> None:
        """Delete a row.  Deleting a class session deletes its bookings."""
