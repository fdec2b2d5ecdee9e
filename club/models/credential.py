"""
Credential database model.

Login secrets live apart from profiles, as they would with an external
auth provider.  ``user_id`` doubles as the profile id.  Timestamps are
timezone-aware UTC.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Credential(SQLModel, table=True):
    __tablename__ = "credentials"

    user_id: str = Field(primary_key=True, max_length=64)
    email: str = Field(unique=True, index=True, max_length=255, nullable=False)
    hashed_password: str = Field(nullable=False)

    created_at: datetime = Field(default_factory=utc_now,
                                 sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now,
                                 sa_column=Column(DateTime(timezone=True), nullable=False))
    last_sign_in_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True)))
