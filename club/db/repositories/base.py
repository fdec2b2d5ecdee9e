"""
Generic table repository.

Shared CRUD for the club tables, keyed by string id.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlmodel import Session, SQLModel, select

ModelT = TypeVar("ModelT", bound=SQLModel)


class TableRepository(Generic[ModelT]):
    """Repository for one SQLModel table."""

    model: Type[ModelT]

    def __init__(self, session: Session):
        """
        Initialize repository with database session.

        Args:
            session: SQLModel database session
        """
        self.session = session

    def create(self, entry: ModelT) -> ModelT:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def get_by_id(self, entry_id: str) -> Optional[ModelT]:
        return self.session.get(self.model, entry_id)

    def get_by_field(self, field: str, value: Any) -> Optional[ModelT]:
        statement = select(self.model).where(getattr(self.model, field) == value)
        return self.session.exec(statement).first()

    def get_all(self) -> list[ModelT]:
        return list(self.session.exec(select(self.model)).all())

    def update(self, entry: ModelT) -> ModelT:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def delete(self, entry_id: str) -> bool:
        """
        Delete a row by id.

        Returns:
            True if deleted, False if not found
        """
        entry = self.get_by_id(entry_id)
        if entry:
            self.session.delete(entry)
            self.session.commit()
            return True
        return False
