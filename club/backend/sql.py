"""
Relational backend.

Implements :class:`club.backend.base.Backend` on a SQLModel engine (the
club's Postgres database in production, SQLite in tests) through the
table repositories.  Each call runs in its own session; SQLAlchemy
errors are reported as :class:`BackendError`.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Optional, Type

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel

from club.backend.base import (BOOKINGS, CLASS_SESSIONS, MODALITIES, PROFILES, Backend, BackendError,
                               CapacityBelowConfirmed, CapacityExceeded, CredentialAlreadyExists, CredentialService,
                               RecordNotFound, Row, new_id, )
from club.core.security import get_password_hash, verify_password
from club.db.repositories.base import TableRepository
from club.db.repositories.booking import BookingRepository, SessionFull, SessionMissing
from club.db.repositories.class_session import CapacityTooLow, ClassSessionRepository
from club.db.repositories.credential import CredentialRepository
from club.db.repositories.modality import ModalityRepository
from club.db.repositories.profile import ProfileRepository
from club.models.credential import Credential, utc_now

logger = logging.getLogger(__name__)

CAPACITY_TRIGGER_ERROR = "class_session_full"
SHRINK_TRIGGER_ERROR = "class_session_overbooked"

_REPOSITORIES: dict[str, Type[TableRepository]] = {
    PROFILES: ProfileRepository,
    MODALITIES: ModalityRepository,
    CLASS_SESSIONS: ClassSessionRepository,
    BOOKINGS: BookingRepository,
}


def _to_storage(row: Row) -> Row:
    """Store datetimes in UTC; SQLite drops the offset."""
    out = dict(row)
    for key, value in out.items():
        if isinstance(value, datetime.datetime) and value.tzinfo is not None:
            out[key] = value.astimezone(datetime.timezone.utc)
    return out


def _from_storage(entry: SQLModel) -> Row:
    row = entry.model_dump()
    for key, value in row.items():
        if isinstance(value, datetime.datetime) and value.tzinfo is None:
            row[key] = value.replace(tzinfo=datetime.timezone.utc)
    return row


class SqlCredentialService(CredentialService):
    """Credentials stored as bcrypt hashes in the ``credentials`` table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def sign_up(self, email: str, password: str) -> str:
        try:
            with Session(self.engine) as session:
                repo = CredentialRepository(session)
                if repo.exists_by_email(email):
                    raise CredentialAlreadyExists(email)
                credential = repo.create(
                    Credential(user_id=new_id(), email=email, hashed_password=get_password_hash(password)))
                return credential.user_id
        except IntegrityError as e:
            raise CredentialAlreadyExists(email) from e
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e

    def sign_in(self, email: str, password: str) -> Optional[str]:
        try:
            with Session(self.engine) as session:
                repo = CredentialRepository(session)
                credential = repo.get_by_email(email)
                if not credential or not verify_password(password, credential.hashed_password):
                    return None
                credential.last_sign_in_at = utc_now()
                repo.update(credential)
                return credential.user_id
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e

    def sign_out(self, user_id: str) -> None:
        # Tokens are stateless; nothing to revoke server-side.
        logger.debug("User %s signed out", user_id)

    def update_password(self, user_id: str, password: str) -> None:
        try:
            with Session(self.engine) as session:
                repo = CredentialRepository(session)
                credential = repo.get_by_id(user_id)
                if credential is None:
                    raise RecordNotFound("credentials", user_id)
                credential.hashed_password = get_password_hash(password)
                credential.updated_at = utc_now()
                repo.update(credential)
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e

    def send_reset_email(self, email: str) -> None:
        # Mail delivery belongs to the auth provider; record the request.
        logger.info("Password reset requested for %s", email)


class SqlBackend(Backend):
    """Backend over a SQLModel engine."""

    name = "sql"

    def __init__(self, engine: Engine):
        self.engine = engine
        self.credentials = SqlCredentialService(engine)

    def create_tables(self) -> None:
        import club.db.base  # noqa: F401  (registers every table)

        SQLModel.metadata.create_all(self.engine)

    def ping(self) -> None:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise BackendError(f"database unreachable: {e}") from e

    def _repository(self, session: Session, table: str) -> TableRepository:
        try:
            return _REPOSITORIES[table](session)
        except KeyError:
            raise BackendError(f"unknown table: {table}") from None

    def fetch_all(self, table: str) -> list[Row]:
        try:
            with Session(self.engine) as session:
                return [_from_storage(e) for e in self._repository(session, table).get_all()]
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e

    def find_one(self, table: str, field: str, value: Any) -> Optional[Row]:
        try:
            with Session(self.engine) as session:
                entry = self._repository(session, table).get_by_field(field, value)
                return _from_storage(entry) if entry else None
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e

    def insert(self, table: str, row: Row) -> Row:
        data = _to_storage(row)
        data.setdefault("id", new_id())
        try:
            with Session(self.engine) as session:
                repo = self._repository(session, table)
                entry = repo.create(repo.model(**data))
                return _from_storage(entry)
        except SessionFull as e:
            raise CapacityExceeded(data["session_id"]) from e
        except SessionMissing as e:
            raise RecordNotFound(CLASS_SESSIONS, data["session_id"]) from e
        except IntegrityError as e:
            # Raised by the Postgres capacity trigger when another writer won the race
            if CAPACITY_TRIGGER_ERROR in str(e.orig):
                raise CapacityExceeded(data["session_id"]) from e
            raise BackendError(str(e)) from e
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e

    def update(self, table: str, row_id: str, changes: Row) -> Row:
        try:
            with Session(self.engine) as session:
                repo = self._repository(session, table)
                if table == CLASS_SESSIONS:
                    entry = repo.get_for_update(row_id)
                else:
                    entry = repo.get_by_id(row_id)
                if entry is None:
                    raise RecordNotFound(table, row_id)
                for key, value in _to_storage(changes).items():
                    if key != "id":
                        setattr(entry, key, value)
                return _from_storage(repo.update(entry))
        except CapacityTooLow as e:
            raise CapacityBelowConfirmed(row_id, e.confirmed) from e
        except IntegrityError as e:
            if SHRINK_TRIGGER_ERROR in str(e.orig):
                raise CapacityBelowConfirmed(row_id) from e
            raise BackendError(str(e)) from e
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e

    def delete(self, table: str, row_id: str) -> None:
        try:
            with Session(self.engine) as session:
                if not self._repository(session, table).delete(row_id):
                    raise RecordNotFound(table, row_id)
        except SQLAlchemyError as e:
            raise BackendError(str(e)) from e
