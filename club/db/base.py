"""
Base database configuration.

Import all models here so Alembic can detect them for migrations.
"""

# Import all models for Alembic autogenerate
from club.models.profile import Profile  # noqa: F401
from club.models.credential import Credential  # noqa: F401
from club.models.modality import ModalityRow  # noqa: F401
from club.models.class_session import ClassSessionRow  # noqa: F401
from club.models.booking import BookingRow  # noqa: F401
