"""
Database engine creation.

The engine is only built in live mode, from ``settings.DATABASE_URL``.
"""

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the SQLModel engine for *database_url*.

    SQLite URLs (tests, local experiments) share a single connection so
    that in-memory databases survive across sessions.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, connect_args={"check_same_thread": False},
                             poolclass=StaticPool)

    return create_engine(
        database_url,
        echo=echo,  # Log SQL queries in debug mode
        pool_pre_ping=True,  # Verify connections before using
        pool_size=5,  # Connection pool size
        max_overflow=10  # Max connections beyond pool_size
    )
