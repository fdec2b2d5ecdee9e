"""
Development server for the club API.

Loads .env, reports which backend and scheduler settings the app will
start with, then serves ``club.main:app`` with uvicorn in reload mode.
Without BACKEND_URL/BACKEND_KEY the API runs local-only on the demo club
(login admin@clube.com / mudar@123).

Usage:
    python scripts/run_dev.py [port]
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

import uvicorn

from club.core.config import settings


def main() -> None:
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8000
    mode = "live database" if settings.DATABASE_URL else "local-only (demo club)"

    print("=" * 60)
    print(f"{settings.PROJECT_NAME} - development server")
    print("=" * 60)
    print(f"Backend:      {mode}")
    print(f"Timezone:     {settings.CLUB_TIMEZONE}")
    print(f"Release hour: {settings.BOOKING_RELEASE_HOUR:02d}:00")
    print(f"Reminders:    {'on' if settings.SCHEDULER_ENABLED else 'off'}"
          f" (every {settings.REMINDER_INTERVAL_SECONDS}s, {settings.REMINDER_LEAD_MINUTES} min ahead)")
    print(f"Docs:         http://localhost:{port}/docs")
    print("=" * 60)

    uvicorn.run("club.main:app", host="0.0.0.0", port=port, reload=True, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
