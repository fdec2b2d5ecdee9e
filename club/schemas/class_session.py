"""
Class session API schemas.

Includes the recurrence specification consumed by the session generator
and the availability row shown to students while browsing.
"""

import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from club.schemas.base import CamelModel


class ClassSession(CamelModel):
    """One scheduled occurrence of a modality."""

    id: str
    modality_id: str
    instructor: str
    start_time: datetime.datetime
    duration_minutes: int
    capacity: int
    category: Optional[str] = None


class ClassSessionCreate(CamelModel):
    """A session to be persisted. Also the generator's draft type."""

    modality_id: str
    instructor: str = Field("", max_length=255)
    start_time: datetime.datetime
    duration_minutes: int = Field(60, ge=1, le=600)
    capacity: int = Field(..., ge=1, le=500)
    category: Optional[str] = Field(None, max_length=80)


ClassSessionDraft = ClassSessionCreate


class ClassSessionUpdate(CamelModel):
    instructor: Optional[str] = Field(None, max_length=255)
    start_time: Optional[datetime.datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=1, le=600)
    capacity: Optional[int] = Field(None, ge=1, le=500)
    category: Optional[str] = Field(None, max_length=80)


class RecurrenceSpec(CamelModel):
    """Weekly pattern expanded into concrete sessions.

    ``days_of_week`` uses 0=Sunday .. 6=Saturday.  Emptiness is checked
    by the generator, not here, so that it is reported as an invalid
    specification rather than a field error.
    """

    modality_id: Optional[str] = None
    instructor: str = ""
    category: Optional[str] = Field(None, max_length=80)
    capacity: int = Field(10, ge=1, le=500)
    duration_minutes: int = Field(60, ge=1, le=600)
    start_date: Optional[datetime.date] = None
    times_of_day: List[datetime.time] = Field(default_factory=list)
    days_of_week: List[int] = Field(default_factory=list)
    weeks_to_repeat: int = Field(1, ge=1, le=52)

    @field_validator("times_of_day")
    @classmethod
    def _dedupe_times(cls, value: List[datetime.time]) -> List[datetime.time]:
        return sorted({t.replace(second=0, microsecond=0) for t in value})

    @field_validator("days_of_week")
    @classmethod
    def _dedupe_days(cls, value: List[int]) -> List[int]:
        for day in value:
            if not 0 <= day <= 6:
                raise ValueError(f"day of week must be between 0 (Sunday) and 6 (Saturday), got {day}")
        return sorted(set(value))


class GenerateSessionsRequest(CamelModel):
    spec: RecurrenceSpec
    # Required when the batch is larger than the confirmation threshold
    confirm: bool = False


class GenerateSessionsResult(CamelModel):
    created: int
    sessions: List[ClassSession]


class OccupancyLevel(str, Enum):
    LOW = "LOW"
    NEAR_FULL = "NEAR_FULL"
    FULL = "FULL"


class SessionAvailability(CamelModel):
    """A bookable session as seen by one user."""

    session: ClassSession
    modality_name: Optional[str] = None
    confirmed_count: int
    occupancy: OccupancyLevel
    locked: bool
    booked_by_me: bool = False
    my_booking_id: Optional[str] = None
