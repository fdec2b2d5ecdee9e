"""
Entity store.

In-memory canonical collections mirrored from the backend.  The store
facade replaces all four collections at once after each successful
mutation; readers always see one consistent snapshot.
"""

from __future__ import annotations

from typing import Iterable, Optional

from club.schemas.booking import Booking, BookingStatus
from club.schemas.class_session import ClassSession
from club.schemas.modality import Modality
from club.schemas.user import Role, User


class EntityStore:
    """Users, modalities, class sessions and bookings, indexed by id."""

    def __init__(self):
        self._users: dict[str, User] = {}
        self._modalities: dict[str, Modality] = {}
        self._sessions: dict[str, ClassSession] = {}
        self._bookings: dict[str, Booking] = {}

    def replace(self, users: Iterable[User], modalities: Iterable[Modality], sessions: Iterable[ClassSession],
                bookings: Iterable[Booking], ) -> None:
        """Swap every collection for a freshly fetched one."""
        new_users = {u.id: u for u in users}
        new_modalities = {m.id: m for m in modalities}
        new_sessions = {s.id: s for s in sorted(sessions, key=lambda s: s.start_time)}
        new_bookings = {b.id: b for b in bookings}
        self._users, self._modalities, self._sessions, self._bookings = (new_users, new_modalities, new_sessions,
                                                                         new_bookings)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    @property
    def users(self) -> list[User]:
        """Every profile, INACTIVE included."""
        return list(self._users.values())

    @property
    def modalities(self) -> list[Modality]:
        return list(self._modalities.values())

    @property
    def sessions(self) -> list[ClassSession]:
        return list(self._sessions.values())

    @property
    def bookings(self) -> list[Booking]:
        return list(self._bookings.values())

    def active_users(self, role: Optional[Role] = None) -> list[User]:
        """Profiles that are not soft-deleted, optionally of one role."""
        return [u for u in self._users.values() if u.is_active and (role is None or u.role is role)]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_modality(self, modality_id: str) -> Optional[Modality]:
        return self._modalities.get(modality_id)

    def get_session(self, session_id: str) -> Optional[ClassSession]:
        return self._sessions.get(session_id)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def sessions_for_modality(self, modality_id: str) -> list[ClassSession]:
        return [s for s in self._sessions.values() if s.modality_id == modality_id]

    def bookings_for_session(self, session_id: str) -> list[Booking]:
        return [b for b in self._bookings.values() if b.session_id == session_id]

    def bookings_for_user(self, user_id: str) -> list[Booking]:
        return [b for b in self._bookings.values() if b.user_id == user_id]

    def confirmed_count(self, session_id: str) -> int:
        return sum(1 for b in self._bookings.values()
                   if b.session_id == session_id and b.status == BookingStatus.CONFIRMED)
