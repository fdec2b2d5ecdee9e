"""
Profile database model.

One row per club member.  Soft deletion sets ``role`` to INACTIVE and
keeps the row so historical bookings still resolve.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class Profile(SQLModel, table=True):
    """Club member profile (``profiles`` table)."""

    __tablename__ = "profiles"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(nullable=False, max_length=255)
    email: str = Field(unique=True, index=True, max_length=255, nullable=False)
    role: str = Field(default="STUDENT", max_length=16, nullable=False)
    phone: Optional[str] = Field(default=None, max_length=32, index=True)
    plan_type: Optional[str] = Field(default=None, max_length=32)
    observation: Optional[str] = Field(default=None, max_length=1000)
    must_change_password: bool = Field(default=False, nullable=False)
    previous_role: Optional[str] = Field(default=None, max_length=16)
