"""
Backend selection.

Live mode needs both ``BACKEND_URL`` and ``BACKEND_KEY`` and a database
that answers; anything else falls back to local-only mode with the demo
fixtures.  The fallback is logged, never fatal.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from club.backend.base import Backend, BackendError
from club.backend.memory import MemoryBackend
from club.backend.sql import SqlBackend
from club.backend.storage import DirectoryImageStorage, ImageStorage
from club.core.config import Settings

logger = logging.getLogger(__name__)


def create_backend(config: Settings) -> Backend:
    database_url = config.DATABASE_URL
    if database_url is None:
        logger.warning("Backend not configured (BACKEND_URL/BACKEND_KEY); running in local-only mode")
        return MemoryBackend.with_fixtures()

    from club.db.session import build_engine

    try:
        backend = SqlBackend(build_engine(database_url, echo=config.DEBUG))
        backend.ping()
    except (BackendError, SQLAlchemyError, ValueError) as e:
        logger.warning("Backend unreachable (%s); running in local-only mode", e)
        return MemoryBackend.with_fixtures()

    logger.info("Connected to backend database")
    return backend


def create_image_storage(config: Settings) -> Optional[ImageStorage]:
    if not config.MEDIA_ROOT:
        return None
    return DirectoryImageStorage(config.MEDIA_ROOT, config.MEDIA_BASE_URL)


__all__ = ["Backend", "create_backend", "create_image_storage"]
