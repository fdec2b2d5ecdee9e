"""
Row <-> domain mapping.

Backend rows are flat dicts keyed by the snake_case column names; domain
objects are the pydantic schemas.  Enums travel as their string values.
Mapping a row to its schema and back returns an equal row.
"""

from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar

from pydantic import BaseModel

from club.backend.base import BOOKINGS, CLASS_SESSIONS, MODALITIES, PROFILES, Row
from club.schemas.booking import Booking
from club.schemas.class_session import ClassSession
from club.schemas.modality import Modality
from club.schemas.user import User

SchemaT = TypeVar("SchemaT", bound=BaseModel)

TABLE_SCHEMAS: dict[str, Type[BaseModel]] = {
    PROFILES: User,
    MODALITIES: Modality,
    CLASS_SESSIONS: ClassSession,
    BOOKINGS: Booking,
}


def _plain(value):
    return value.value if isinstance(value, Enum) else value


def to_row(obj: BaseModel, exclude_unset: bool = False) -> Row:
    """Flatten a schema into a backend row (or a partial update)."""
    data = obj.model_dump(exclude_unset=exclude_unset)
    return {key: _plain(value) for key, value in data.items()}


def from_row(schema: Type[SchemaT], row: Row) -> SchemaT:
    return schema.model_validate(row)


def user_from_row(row: Row) -> User:
    return from_row(User, row)


def modality_from_row(row: Row) -> Modality:
    return from_row(Modality, row)


def session_from_row(row: Row) -> ClassSession:
    return from_row(ClassSession, row)


def booking_from_row(row: Row) -> Booking:
    return from_row(Booking, row)
