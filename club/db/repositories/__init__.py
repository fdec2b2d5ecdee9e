"""Database repositories."""

from club.db.repositories.booking import BookingRepository
from club.db.repositories.class_session import ClassSessionRepository
from club.db.repositories.credential import CredentialRepository
from club.db.repositories.modality import ModalityRepository
from club.db.repositories.profile import ProfileRepository

__all__ = [
    "ProfileRepository",
    "CredentialRepository",
    "ModalityRepository",
    "ClassSessionRepository",
    "BookingRepository",
]
