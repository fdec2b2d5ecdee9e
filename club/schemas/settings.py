"""Runtime club settings editable by admins."""

from pydantic import Field

from club.schemas.base import CamelModel


class BookingReleaseHour(CamelModel):
    """Hour of the day (0-23) from which next-day sessions open for booking."""

    hour: int = Field(..., ge=0, le=23)
