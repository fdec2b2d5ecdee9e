"""Profile repository."""

from club.db.repositories.base import TableRepository
from club.models.profile import Profile


class ProfileRepository(TableRepository[Profile]):
    """Repository for Profile database operations.

    Lookups by email or phone go through :meth:`get_by_field`.
    """

    model = Profile
