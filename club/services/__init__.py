"""Business logic services."""

from club.services.club_store import ClubStore
from club.services.reminders import LogNotifier, Notifier, ReminderService

__all__ = [
    "ClubStore",
    "LogNotifier",
    "Notifier",
    "ReminderService",
]
