"""Shared fixtures.

The environment is set before any ``club`` import: settings are read at
import time and ``SECRET_KEY`` is required.
"""

import datetime
import os
from zoneinfo import ZoneInfo

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["BACKEND_URL"] = ""
os.environ["BACKEND_KEY"] = ""
os.environ["MEDIA_ROOT"] = ""

import pytest

from club.backend.memory import MemoryBackend
from club.services.club_store import ClubStore

CLUB_TZ = ZoneInfo("America/Sao_Paulo")

# A Tuesday morning, after the default release hour
NOW = datetime.datetime(2026, 3, 10, 9, 30, tzinfo=CLUB_TZ)


class FrozenClock:
    """Callable clock whose time tests move by hand."""

    def __init__(self, now: datetime.datetime):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend.with_fixtures(now=NOW)


@pytest.fixture
def store(backend, clock) -> ClubStore:
    club_store = ClubStore(backend, release_hour=8, timezone=CLUB_TZ, clock=clock)
    club_store.refresh()
    return club_store
