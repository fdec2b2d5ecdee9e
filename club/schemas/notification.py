"""Notification schemas emitted by the reminder scan."""

import datetime
from enum import Enum
from typing import Optional

from club.schemas.base import CamelModel


class NotificationKind(str, Enum):
    UPCOMING_CLASS = "UPCOMING_CLASS"
    NEW_CLASSES = "NEW_CLASSES"


class Notification(CamelModel):
    kind: NotificationKind
    title: str
    message: str
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    created_at: datetime.datetime
