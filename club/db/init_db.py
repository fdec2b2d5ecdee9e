"""
Database initialization.

Creates all tables and seeds the first admin account.
"""

from club.backend.base import CredentialAlreadyExists, PROFILES
from club.backend.sql import SqlBackend
from club.core.config import settings
from club.db.session import build_engine


def init_db() -> None:
    """
    Initialize database schema.

    - Creates all SQLModel tables
    - Creates the ADMIN profile from SEED_ADMIN_* (if a password is set)
    """
    if settings.DATABASE_URL is None:
        raise RuntimeError("BACKEND_URL and BACKEND_KEY must be set to initialize the database")

    backend = SqlBackend(build_engine(settings.DATABASE_URL, echo=settings.DEBUG))

    print("Creating database tables...")
    backend.create_tables()
    print("✓ Tables created successfully")

    if not settings.SEED_ADMIN_PASSWORD:
        print("SEED_ADMIN_PASSWORD not set, skipping admin account")
        return

    print(f"Seeding admin account {settings.SEED_ADMIN_EMAIL}...")
    try:
        user_id = backend.credentials.sign_up(settings.SEED_ADMIN_EMAIL, settings.SEED_ADMIN_PASSWORD)
    except CredentialAlreadyExists:
        print("✓ Admin login already exists")
        return

    if backend.find_one(PROFILES, "email", settings.SEED_ADMIN_EMAIL) is None:
        backend.insert(PROFILES, {"id": user_id, "name": settings.SEED_ADMIN_NAME, "email": settings.SEED_ADMIN_EMAIL,
                                  "role": "ADMIN", "phone": None, "plan_type": None, "observation": None,
                                  "must_change_password": False, "previous_role": None})
    print("✓ Admin account created")

    print("Database initialization complete!")


if __name__ == "__main__":
    init_db()
