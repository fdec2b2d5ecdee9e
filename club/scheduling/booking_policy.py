"""
Booking policy: admission and release-window rules.

Decides whether a reservation attempt for a class session is admitted,
and classifies live occupancy for display.  Every function here is pure:
it works on the snapshot it is handed and owns no state.

Rules
-----

1. **Capacity**: a session admits bookings while its CONFIRMED count is
   below ``capacity``.  A capacity of 0 is always full.
2. **Release hour**: students may book sessions on a *later* calendar day
   only from ``release_hour:00`` onwards.  Same-day sessions are never
   locked.  The boundary is strict: at exactly ``release_hour:00`` the
   session is open.
3. **Past sessions** are not handled here; the caller filters them out
   with :mod:`club.scheduling.browsing` before asking.

Calendar days are compared in the timezone of ``now``.

The local check is a UX optimisation.  The authoritative capacity
constraint lives in the backend (see ``CapacityExceeded``).
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel

from club.schemas.booking import Booking, BookingStatus
from club.schemas.class_session import ClassSession, OccupancyLevel
from club.schemas.user import Role

# ======================================================================
# Classification types
# ======================================================================


class RejectionReason(str, Enum):
    """Why a reservation attempt was refused."""

    FULL = "FULL"
    LOCKED = "LOCKED"
    # Checked by the store facade, not by can_book
    ALREADY_BOOKED = "ALREADY_BOOKED"
    UNAVAILABLE = "UNAVAILABLE"


_REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.FULL: "Turma lotada. Não há mais vagas para esta aula.",
    RejectionReason.LOCKED: "Agendamento ainda não liberado. As aulas de amanhã abrem às {hour:02d}:00.",
    RejectionReason.ALREADY_BOOKED: "Você já está inscrito nesta aula.",
    RejectionReason.UNAVAILABLE: "Esta aula não está disponível para agendamento.",
}


def rejection_message(reason: RejectionReason, release_hour: int = 8) -> str:
    """User-facing message for a rejection reason."""
    return _REJECTION_MESSAGES[reason].format(hour=release_hour)


class BookingDecision(BaseModel):
    """Outcome of :func:`can_book`: admitted, or rejected with a reason."""

    admitted: bool
    reason: Optional[RejectionReason] = None

    @classmethod
    def admit(cls) -> "BookingDecision":
        return cls(admitted=True)

    @classmethod
    def reject(cls, reason: RejectionReason) -> "BookingDecision":
        return cls(admitted=False, reason=reason)


# ======================================================================
# Occupancy
# ======================================================================

NEAR_FULL_RATIO = 0.8


def confirmed_count(session_id: str, bookings: Iterable[Booking]) -> int:
    """Number of CONFIRMED bookings referencing *session_id*."""
    return sum(1 for b in bookings if b.session_id == session_id and b.status == BookingStatus.CONFIRMED)


def occupancy_level(confirmed: int, capacity: int) -> OccupancyLevel:
    """Classify how full a session is.

    ``>= 100%`` is FULL, ``>= 80%`` is NEAR_FULL, anything else LOW.
    """
    if capacity <= 0:
        return OccupancyLevel.FULL
    ratio = confirmed / capacity
    if ratio >= 1.0:
        return OccupancyLevel.FULL
    if ratio >= NEAR_FULL_RATIO:
        return OccupancyLevel.NEAR_FULL
    return OccupancyLevel.LOW


# ======================================================================
# Release window
# ======================================================================


def _local_date(moment: datetime.datetime, now: datetime.datetime) -> datetime.date:
    """Calendar date of *moment* as seen from *now*'s timezone."""
    if moment.tzinfo is not None and now.tzinfo is not None:
        return moment.astimezone(now.tzinfo).date()
    return moment.date()


def is_locked(session: ClassSession, now: datetime.datetime, release_hour: int) -> bool:
    """``True`` when *session* is on a later day and the release hour has not arrived."""
    is_future_day = _local_date(session.start_time, now) > now.date()
    return is_future_day and now.hour < release_hour


# ======================================================================
# Admission
# ======================================================================


def can_book(session: ClassSession, now: datetime.datetime, bookings: Iterable[Booking], release_hour: int,
             role: Role, ) -> BookingDecision:
    """Decide whether a user with *role* may reserve a seat in *session*.

    Args:
        session: Target session.
        now: Current instant (club timezone).
        bookings: Snapshot of bookings; only those of *session* count.
        release_hour: Configured release hour (0-23).
        role: Role of the acting user.  Only students are subject to the
            release window.

    Returns:
        :class:`BookingDecision`.  FULL is checked before LOCKED.
    """
    if confirmed_count(session.id, bookings) >= session.capacity:
        return BookingDecision.reject(RejectionReason.FULL)

    if role is Role.STUDENT and is_locked(session, now, release_hour):
        return BookingDecision.reject(RejectionReason.LOCKED)

    return BookingDecision.admit()
