"""
Database initialization script.

Creates the club tables and the first admin account.  For production
databases prefer ``alembic upgrade head``, which also installs the
Postgres booking capacity trigger.

Usage:
    python scripts/init_db.py
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dotenv import load_dotenv

load_dotenv()

from club.backend.base import BackendError
from club.db.init_db import init_db

if __name__ == "__main__":
    print("=" * 50)
    print("Club Scheduler Database Initialization")
    print("=" * 50)
    print()

    try:
        init_db()
        print()
        print("=" * 50)
        print("SUCCESS: Database initialized!")
        print("=" * 50)
        sys.exit(0)

    except (BackendError, RuntimeError) as e:
        print()
        print("=" * 50)
        print("ERROR: Database initialization failed!")
        print(f"Details: {e}")
        print("=" * 50)
        sys.exit(1)
