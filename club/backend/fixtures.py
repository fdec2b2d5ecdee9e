"""
Demo club used in local-only mode.

Three modalities, a handful of sessions today and tomorrow, one admin,
two students and one existing booking.  Every demo login uses
:data:`FIXTURE_PASSWORD`.
"""

from __future__ import annotations

import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from club.backend.base import BOOKINGS, CLASS_SESSIONS, MODALITIES, PROFILES, Row
from club.core.config import settings

FIXTURE_PASSWORD = "mudar@123"

_PROFILES: list[Row] = [
    {"id": "1", "name": "Admin Master", "email": "admin@clube.com", "role": "ADMIN", "phone": None,
     "plan_type": None, "observation": None, "must_change_password": False, "previous_role": None},
    {"id": "2", "name": "João Silva", "email": "aluno@clube.com", "role": "STUDENT", "phone": "11999998888",
     "plan_type": "Mensalista", "observation": "Prefere treinos pela manhã.", "must_change_password": False,
     "previous_role": None},
    {"id": "3", "name": "Maria Oliveira", "email": "maria@clube.com", "role": "STUDENT", "phone": "11977776666",
     "plan_type": "Totalpass", "observation": None, "must_change_password": False, "previous_role": None},
]

_MODALITIES: list[Row] = [
    {"id": "m1", "name": "Natação",
     "description": "Aulas de natação para todos os níveis na piscina semi-olímpica.",
     "image_url": "https://picsum.photos/400/200?random=1"},
    {"id": "m2", "name": "Futevôlei", "description": "Treino técnico e tático na quadra de areia.",
     "image_url": "https://picsum.photos/400/200?random=2"},
    {"id": "m3", "name": "Judô", "description": "Arte marcial focada em disciplina e técnica.",
     "image_url": "https://picsum.photos/400/200?random=3"},
]

# (id, modality, instructor, day offset, hour, minute, duration, capacity, category)
_SESSIONS = [
    ("s1", "m1", "Prof. Carlos", 0, 10, 0, 60, 5, "Infantil"),
    ("s2", "m2", "Prof. Ana", 0, 18, 0, 90, 10, "Iniciante"),
    ("s4", "m2", "Prof. Ana", 0, 19, 30, 90, 8, "Intermediário"),
    ("s3", "m3", "Sensei Yamamoto", 1, 18, 0, 60, 15, None),
]


def fixture_rows(now: Optional[datetime.datetime] = None) -> dict[str, list[Row]]:
    """Rows per table, with sessions placed relative to *now*."""
    if now is None:
        now = datetime.datetime.now(ZoneInfo(settings.CLUB_TIMEZONE))
    today = now.date()

    sessions = []
    for sid, modality_id, instructor, offset, hour, minute, duration, capacity, category in _SESSIONS:
        start = datetime.datetime.combine(today + datetime.timedelta(days=offset), datetime.time(hour, minute),
                                          tzinfo=now.tzinfo)
        sessions.append({"id": sid, "modality_id": modality_id, "instructor": instructor, "start_time": start,
                         "duration_minutes": duration, "capacity": capacity, "category": category})

    bookings = [{"id": "b1", "session_id": "s1", "user_id": "3", "status": "CONFIRMED", "booked_at": now}]

    return {
        PROFILES: [dict(p) for p in _PROFILES],
        MODALITIES: [dict(m) for m in _MODALITIES],
        CLASS_SESSIONS: sessions,
        BOOKINGS: bookings,
    }


def fixture_logins() -> list[tuple[str, str, str]]:
    """``(user_id, email, password)`` for every demo profile."""
    return [(p["id"], p["email"], FIXTURE_PASSWORD) for p in _PROFILES]
