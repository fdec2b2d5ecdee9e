"""
Booking repository.

Inserting a CONFIRMED booking is the authoritative capacity check: the
session row is locked (``SELECT ... FOR UPDATE`` on Postgres), CONFIRMED
bookings are counted, and the insert is refused when the session is full.
"""

from typing import Optional

from sqlalchemy import func
from sqlmodel import select

from club.db.repositories.base import TableRepository
from club.models.booking import BookingRow
from club.models.class_session import ClassSessionRow

CONFIRMED = "CONFIRMED"


class SessionFull(Exception):
    """The session has no CONFIRMED seat left."""


class SessionMissing(Exception):
    """The booked session does not exist."""


class BookingRepository(TableRepository[BookingRow]):
    """Repository for BookingRow database operations."""

    model = BookingRow

    def count_confirmed(self, session_id: str) -> int:
        statement = (select(func.count()).select_from(BookingRow)
                     .where(BookingRow.session_id == session_id, BookingRow.status == CONFIRMED, ))
        return self.session.exec(statement).one()

    def lock_session(self, session_id: str) -> Optional[ClassSessionRow]:
        statement = select(ClassSessionRow).where(ClassSessionRow.id == session_id).with_for_update()
        return self.session.exec(statement).first()

    def create(self, entry: BookingRow) -> BookingRow:
        """Insert a booking, refusing CONFIRMED ones beyond capacity.

        Raises:
            SessionMissing: If the session does not exist.
            SessionFull: If the session has no seat left.
        """
        if entry.status == CONFIRMED:
            class_session = self.lock_session(entry.session_id)
            if class_session is None:
                self.session.rollback()
                raise SessionMissing(entry.session_id)
            if self.count_confirmed(entry.session_id) >= class_session.capacity:
                self.session.rollback()
                raise SessionFull(entry.session_id)
        return super().create(entry)
