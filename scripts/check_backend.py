"""Check the connection to the configured backend database."""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load .env file
from dotenv import load_dotenv

load_dotenv()

from club.backend.base import TABLES, BackendError
from club.backend.sql import SqlBackend
from club.core.config import settings
from club.db.session import build_engine

print("=" * 60)
print("Testing backend connection")
print("=" * 60)

if settings.DATABASE_URL is None:
    print("✗ BACKEND_URL/BACKEND_KEY missing or invalid: the API would run in local-only mode")
    sys.exit(1)

print(f"Backend URL: {settings.BACKEND_URL.split('@')[-1]}")  # Hide credentials
print()

backend = SqlBackend(build_engine(settings.DATABASE_URL))
try:
    backend.ping()
    print("✓ Connection successful!")
    for table in TABLES:
        print(f"  {table}: {len(backend.fetch_all(table))} rows")
except BackendError as e:
    print(f"✗ Connection failed: {e}")
    sys.exit(1)
