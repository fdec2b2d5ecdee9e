"""
Class session database model.

``capacity`` is the maximum number of CONFIRMED bookings.
"""

import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime
from sqlmodel import Field, SQLModel


class ClassSessionRow(SQLModel, table=True):
    """One scheduled class (``class_sessions`` table)."""

    __tablename__ = "class_sessions"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_class_sessions_capacity_positive"),
        CheckConstraint("duration_minutes >= 1", name="ck_class_sessions_duration_positive"),
    )

    id: str = Field(primary_key=True, max_length=64)
    modality_id: str = Field(foreign_key="modalities.id", nullable=False, index=True, max_length=64)
    instructor: str = Field(default="", max_length=255)
    start_time: datetime.datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False, index=True))
    duration_minutes: int = Field(default=60, nullable=False)
    capacity: int = Field(nullable=False)
    category: Optional[str] = Field(default=None, max_length=80)
