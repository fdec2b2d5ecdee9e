"""Credential repository."""

from typing import Optional

from sqlmodel import select

from club.db.repositories.base import TableRepository
from club.models.credential import Credential


class CredentialRepository(TableRepository[Credential]):
    """Repository for Credential database operations."""

    model = Credential

    def get_by_email(self, email: str) -> Optional[Credential]:
        statement = select(Credential).where(Credential.email == email)
        return self.session.exec(statement).first()

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None
