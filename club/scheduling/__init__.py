"""Scheduling rules: booking admission, release window and recurrence expansion."""

from club.scheduling.booking_policy import BookingDecision, RejectionReason, can_book, is_locked, occupancy_level
from club.scheduling.browsing import browsable_sessions, is_browsable
from club.scheduling.session_generator import InvalidRecurrenceSpec, generate

__all__ = [
    "BookingDecision",
    "RejectionReason",
    "can_book",
    "is_locked",
    "occupancy_level",
    "browsable_sessions",
    "is_browsable",
    "InvalidRecurrenceSpec",
    "generate",
]
