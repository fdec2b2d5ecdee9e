"""SQLModel database models."""

from club.models.booking import BookingRow
from club.models.class_session import ClassSessionRow
from club.models.credential import Credential
from club.models.modality import ModalityRow
from club.models.profile import Profile

__all__ = [
    "Profile",
    "Credential",
    "ModalityRow",
    "ClassSessionRow",
    "BookingRow",
]
