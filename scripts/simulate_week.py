"""What does the club look like after scheduling a week of classes?

Runs entirely in local-only mode: generates a recurring schedule for the
demo club, books a few seats and prints the student's browsing view.
"""

import datetime
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from fastapi import HTTPException

from club.backend.memory import MemoryBackend
from club.core.config import settings
from club.schemas.class_session import RecurrenceSpec
from club.services.club_store import ClubStore

store = ClubStore.from_settings(settings, MemoryBackend.with_fixtures())
store.refresh()
now = store.now()

print("=" * 60)
print(f"Demo club at {now:%Y-%m-%d %H:%M} ({settings.CLUB_TIMEZONE})")
print("=" * 60)

spec = RecurrenceSpec(modality_id="m1", instructor="Prof. Carlos", category="Adulto", capacity=3,
                      start_date=now.date(), times_of_day=[datetime.time(7, 0), datetime.time(20, 0)],
                      days_of_week=[1, 3, 5], weeks_to_repeat=1)
created = store.generate_sessions(spec)
print(f"Generated {len(created)} swimming sessions")
print()

student = store.get_user("2")
for row in store.browse_sessions(student)[:3]:
    try:
        store.book_session(student, row.session.id)
        print(f"✓ booked {row.session.start_time:%a %H:%M} {row.modality_name}")
    except HTTPException as e:
        print(f"✗ {row.session.start_time:%a %H:%M} {row.modality_name}: {e.detail}")

print()
print(f"{'When':<12} {'Modality':<12} {'Seats':>7}  {'Occupancy':<10} Mine")
print("-" * 60)
for row in store.browse_sessions(student):
    seats = f"{row.confirmed_count}/{row.session.capacity}"
    lock = " (locked)" if row.locked else ""
    mine = "yes" if row.booked_by_me else ""
    print(f"{row.session.start_time:%a %H:%M}   {row.modality_name or '?':<12} {seats:>7}  "
          f"{row.occupancy.value:<10} {mine}{lock}")
