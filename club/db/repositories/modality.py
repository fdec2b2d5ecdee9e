"""Modality repository."""

from club.db.repositories.base import TableRepository
from club.models.modality import ModalityRow


class ModalityRepository(TableRepository[ModalityRow]):
    """Repository for ModalityRow database operations."""

    model = ModalityRow
