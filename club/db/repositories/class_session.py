"""
Class session repository.

Deleting a session also deletes its bookings.  Capacity can only shrink
down to the number of CONFIRMED bookings.
"""

from typing import Optional

from sqlalchemy import delete, func
from sqlmodel import select

from club.db.repositories.base import TableRepository
from club.models.booking import BookingRow
from club.models.class_session import ClassSessionRow


class CapacityTooLow(Exception):
    """The new capacity is below the CONFIRMED bookings of the session."""

    def __init__(self, confirmed: int):
        super().__init__(f"{confirmed} confirmed bookings")
        self.confirmed = confirmed


class ClassSessionRepository(TableRepository[ClassSessionRow]):
    """Repository for ClassSessionRow database operations."""

    model = ClassSessionRow

    def get_for_update(self, entry_id: str) -> Optional[ClassSessionRow]:
        """Fetch the row locked against concurrent bookings."""
        statement = select(ClassSessionRow).where(ClassSessionRow.id == entry_id).with_for_update()
        return self.session.exec(statement).first()

    def count_confirmed(self, entry_id: str) -> int:
        statement = (select(func.count()).select_from(BookingRow)
                     .where(BookingRow.session_id == entry_id, BookingRow.status == "CONFIRMED", ))
        return self.session.exec(statement).one()

    def update(self, entry: ClassSessionRow) -> ClassSessionRow:
        """Persist *entry*, refusing a capacity below the CONFIRMED count.

        Raises:
            CapacityTooLow: If more bookings are confirmed than seats remain.
        """
        with self.session.no_autoflush:
            confirmed = self.count_confirmed(entry.id)
        if entry.capacity < confirmed:
            self.session.rollback()
            raise CapacityTooLow(confirmed)
        return super().update(entry)

    def delete(self, entry_id: str) -> bool:
        entry = self.get_by_id(entry_id)
        if not entry:
            return False
        self.session.execute(delete(BookingRow).where(BookingRow.session_id == entry_id))
        self.session.delete(entry)
        self.session.commit()
        return True
