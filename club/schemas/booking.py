"""Booking API schemas."""

import datetime
from enum import Enum

from club.schemas.base import CamelModel


class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    ATTENDED = "ATTENDED"
    MISSED = "MISSED"
    CANCELLED_BY_STUDENT = "CANCELLED_BY_STUDENT"
    CANCELLED_BY_ADMIN = "CANCELLED_BY_ADMIN"


class Booking(CamelModel):
    """A student's seat in a class session."""

    id: str
    session_id: str
    user_id: str
    status: BookingStatus
    booked_at: datetime.datetime


class BookingCreate(CamelModel):
    session_id: str
