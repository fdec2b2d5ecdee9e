"""
Booking database model.

The capacity rule (CONFIRMED bookings <= session capacity) is enforced
by :class:`club.db.repositories.booking.BookingRepository` under a row
lock, and by a trigger on Postgres (see the alembic migration).
"""

import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


class BookingRow(SQLModel, table=True):
    """A reservation (``bookings`` table)."""

    __tablename__ = "bookings"

    id: str = Field(primary_key=True, max_length=64)
    session_id: str = Field(foreign_key="class_sessions.id", nullable=False, index=True, max_length=64)
    user_id: str = Field(foreign_key="profiles.id", nullable=False, index=True, max_length=64)
    status: str = Field(default="CONFIRMED", max_length=32, nullable=False, index=True)
    booked_at: datetime.datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
