"""
Class reminders.

Periodic scan over the store snapshot that produces two kinds of
notification:

- an *upcoming class* reminder for each CONFIRMED booking whose session
  starts within the lead time (sent once per booking);
- a *new classes* alert when the number of sessions grew since the
  previous scan.  The first scan only records the baseline.

The scan never writes booking data.  Delivery is delegated to a
:class:`Notifier`; the default one only logs.
"""

from __future__ import annotations

import datetime
import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from club.schemas.booking import BookingStatus
from club.schemas.notification import Notification, NotificationKind
from club.services.club_store import ClubStore

logger = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    def send(self, notification: Notification) -> None:
        ...


class LogNotifier(Notifier):
    """Writes notifications to the application log."""

    def send(self, notification: Notification) -> None:
        logger.info("[%s] %s: %s (user=%s)", notification.kind.value, notification.title, notification.message,
                    notification.user_id or "*")


class ReminderService:

    def __init__(self, store: ClubStore, notifier: Optional[Notifier] = None, lead_minutes: int = 60):
        self.store = store
        self.notifier = notifier or LogNotifier()
        self.lead = datetime.timedelta(minutes=lead_minutes)
        self._lock = threading.Lock()
        self._reminded: set[str] = set()
        self._session_count: Optional[int] = None

    def run(self) -> list[Notification]:
        """Scheduler entry point: reload the snapshot, then scan."""
        self.store.refresh()
        return self.scan()

    def _prune_reminded(self, now: datetime.datetime) -> None:
        """Keep only reminded bookings still CONFIRMED for a class not yet started."""
        keep = set()
        for booking_id in self._reminded:
            booking = self.store.entities.get_booking(booking_id)
            if booking is None or booking.status != BookingStatus.CONFIRMED:
                continue
            class_session = self.store.entities.get_session(booking.session_id)
            if class_session is not None and class_session.start_time >= now:
                keep.add(booking_id)
        self._reminded = keep

    def scan(self, now: Optional[datetime.datetime] = None) -> list[Notification]:
        now = now or self.store.now()
        horizon = now + self.lead
        notifications: list[Notification] = []

        with self._lock:
            for booking in self.store.bookings:
                if booking.status != BookingStatus.CONFIRMED or booking.id in self._reminded:
                    continue
                class_session = self.store.entities.get_session(booking.session_id)
                if class_session is None or not now <= class_session.start_time <= horizon:
                    continue
                self._reminded.add(booking.id)
                modality = self.store.entities.get_modality(class_session.modality_id)
                starts_at = class_session.start_time.astimezone(self.store.timezone).strftime("%H:%M")
                notifications.append(Notification(
                    kind=NotificationKind.UPCOMING_CLASS, title="Aula em breve",
                    message=f"Sua aula de {modality.name if modality else 'esporte'} começa às {starts_at}.",
                    user_id=booking.user_id, session_id=class_session.id, created_at=now, ))

            self._prune_reminded(now)

            count = len(self.store.sessions)
            if self._session_count is not None and count > self._session_count:
                added = count - self._session_count
                notifications.append(Notification(
                    kind=NotificationKind.NEW_CLASSES, title="Novas aulas disponíveis",
                    message=f"{added} nova(s) aula(s) adicionada(s) à agenda.", created_at=now, ))
            self._session_count = count

        for notification in notifications:
            try:
                self.notifier.send(notification)
            except Exception:
                logger.exception("Could not deliver %s notification to %s", notification.kind.value,
                                 notification.user_id or "all users")
        return notifications
