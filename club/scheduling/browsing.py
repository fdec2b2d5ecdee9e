"""
Student browsing window.

A session is offered to students only if it falls on today or tomorrow
(club timezone) and, when today, has not started yet.
"""

from __future__ import annotations

import datetime
from typing import Iterable

from club.schemas.class_session import ClassSession


def _local(moment: datetime.datetime, now: datetime.datetime) -> datetime.datetime:
    if moment.tzinfo is not None and now.tzinfo is not None:
        return moment.astimezone(now.tzinfo)
    return moment


def is_browsable(session: ClassSession, now: datetime.datetime) -> bool:
    start = _local(session.start_time, now)
    today = now.date()
    if start.date() == today:
        return start > now
    return start.date() == today + datetime.timedelta(days=1)


def browsable_sessions(sessions: Iterable[ClassSession], now: datetime.datetime) -> list[ClassSession]:
    """Sessions open for browsing, earliest first."""
    return sorted((s for s in sessions if is_browsable(s, now)), key=lambda s: s.start_time)
