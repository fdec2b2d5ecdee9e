"""Tests for the student browsing window."""

import datetime
from zoneinfo import ZoneInfo

from club.scheduling.browsing import browsable_sessions, is_browsable
from club.schemas.class_session import ClassSession

TZ = ZoneInfo("America/Sao_Paulo")
NOW = datetime.datetime(2026, 3, 10, 12, 0, tzinfo=TZ)


def _make_session(start: datetime.datetime, session_id: str = "s") -> ClassSession:
    return ClassSession(id=session_id, modality_id="m1", instructor="", start_time=start, duration_minutes=60,
                        capacity=10)


class TestIsBrowsable:
    def test_later_today(self):
        assert is_browsable(_make_session(NOW + datetime.timedelta(minutes=1)), NOW)

    def test_already_started_today(self):
        assert not is_browsable(_make_session(NOW), NOW)
        assert not is_browsable(_make_session(NOW - datetime.timedelta(hours=1)), NOW)

    def test_tomorrow_any_time(self):
        assert is_browsable(_make_session(datetime.datetime(2026, 3, 11, 6, 0, tzinfo=TZ)), NOW)
        assert is_browsable(_make_session(datetime.datetime(2026, 3, 11, 23, 59, tzinfo=TZ)), NOW)

    def test_day_after_tomorrow(self):
        assert not is_browsable(_make_session(datetime.datetime(2026, 3, 12, 0, 0, tzinfo=TZ)), NOW)

    def test_yesterday(self):
        assert not is_browsable(_make_session(datetime.datetime(2026, 3, 9, 20, 0, tzinfo=TZ)), NOW)

    def test_utc_start_converted_to_club_day(self):
        # 02:00 UTC on the 12th is 23:00 on the 11th in São Paulo
        start = datetime.datetime(2026, 3, 12, 2, 0, tzinfo=datetime.timezone.utc)
        assert is_browsable(_make_session(start), NOW)


class TestBrowsableSessions:
    def test_filters_and_sorts(self):
        sessions = [
            _make_session(datetime.datetime(2026, 3, 11, 18, 0, tzinfo=TZ), "tomorrow"),
            _make_session(datetime.datetime(2026, 3, 10, 8, 0, tzinfo=TZ), "past"),
            _make_session(datetime.datetime(2026, 3, 10, 19, 0, tzinfo=TZ), "tonight"),
            _make_session(datetime.datetime(2026, 3, 13, 19, 0, tzinfo=TZ), "friday"),
        ]
        assert [s.id for s in browsable_sessions(sessions, NOW)] == ["tonight", "tomorrow"]
