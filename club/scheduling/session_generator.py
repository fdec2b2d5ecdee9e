"""
Recurring session generator.

Expands a weekly pattern (days of week × times of day × number of weeks)
into concrete session drafts.  Nothing is persisted here; the store
facade inserts each draft.

Walk every calendar day from ``start_date`` for ``weeks_to_repeat * 7``
days; on each day whose weekday is selected, emit one draft per time of
day.  The result therefore holds exactly
``weeks_to_repeat * len(days_of_week) * len(times_of_day)`` drafts,
ordered by day then time.
"""

from __future__ import annotations

import datetime
from typing import Optional

from club.schemas.class_session import ClassSessionDraft, RecurrenceSpec

# Batches above this size need an explicit confirmation from the admin.
LARGE_BATCH_THRESHOLD = 50


class InvalidRecurrenceSpec(ValueError):
    """The recurrence specification cannot be expanded."""


def sunday_based_weekday(day: datetime.date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def validate_spec(spec: RecurrenceSpec) -> None:
    """Raise :class:`InvalidRecurrenceSpec` when *spec* is incomplete."""
    if not spec.modality_id:
        raise InvalidRecurrenceSpec("Selecione uma modalidade.")
    if spec.start_date is None:
        raise InvalidRecurrenceSpec("Informe a data de início.")
    if not spec.times_of_day:
        raise InvalidRecurrenceSpec("Adicione pelo menos um horário.")
    if not spec.days_of_week:
        raise InvalidRecurrenceSpec("Selecione pelo menos um dia da semana.")


def expected_count(spec: RecurrenceSpec) -> int:
    return spec.weeks_to_repeat * len(set(spec.days_of_week)) * len(set(spec.times_of_day))


def generate(spec: RecurrenceSpec, tz: Optional[datetime.tzinfo] = None) -> list[ClassSessionDraft]:
    """Expand *spec* into session drafts.

    Args:
        spec: Recurrence specification.
        tz: Timezone attached to each generated ``start_time`` (the club
            timezone).  ``None`` produces naive datetimes.

    Returns:
        List of :class:`ClassSessionDraft`, ordered by start time.

    Raises:
        InvalidRecurrenceSpec: If modality, start date, times or days
            are missing.
    """
    validate_spec(spec)

    days = set(spec.days_of_week)
    times = sorted(set(spec.times_of_day))
    drafts: list[ClassSessionDraft] = []

    for offset in range(spec.weeks_to_repeat * 7):
        day = spec.start_date + datetime.timedelta(days=offset)
        if sunday_based_weekday(day) not in days:
            continue
        for time_of_day in times:
            start = datetime.datetime.combine(day, time_of_day).replace(tzinfo=tz)
            drafts.append(ClassSessionDraft(modality_id=spec.modality_id, instructor=spec.instructor,
                                            start_time=start, duration_minutes=spec.duration_minutes,
                                            capacity=spec.capacity, category=spec.category or None, ))

    return drafts
