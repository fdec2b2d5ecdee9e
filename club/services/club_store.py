"""
Club store facade.

The single query/mutation surface used by the API.  It holds the entity
store (the in-memory snapshot), the backend collaborator and the booking
release hour, and applies the scheduling rules before any write.

Every mutation follows the same path:

1. validate against the current snapshot (policy engine / generator),
2. write to the backend,
3. on success, re-fetch every collection (no incremental merge),
4. report the outcome, or raise :class:`HTTPException` with a specific
   message.  Backend failures become 503 and leave the snapshot as it was.

The same path serves live and local-only mode; only the backend differs.
"""

from __future__ import annotations

import datetime
import logging
import re
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status

from club.backend.base import (BOOKINGS, CLASS_SESSIONS, MODALITIES, PROFILES, Backend, BackendError,
                               CapacityBelowConfirmed, CapacityExceeded, CredentialAlreadyExists, RecordNotFound, )
from club.backend.mapping import booking_from_row, modality_from_row, session_from_row, to_row, user_from_row
from club.backend.storage import ImageStorage
from club.core.config import Settings
from club.core.security import create_access_token
from club.scheduling.booking_policy import (RejectionReason, can_book, is_locked, occupancy_level,
                                            rejection_message, )
from club.scheduling.browsing import browsable_sessions, is_browsable
from club.scheduling.session_generator import LARGE_BATCH_THRESHOLD, InvalidRecurrenceSpec, generate
from club.schemas.booking import Booking, BookingStatus
from club.schemas.class_session import (ClassSession, ClassSessionCreate, ClassSessionUpdate, RecurrenceSpec,
                                        SessionAvailability, )
from club.schemas.modality import Modality, ModalityCreate, ModalityUpdate
from club.schemas.user import RegistrationResult, Role, Token, User, UserRegistration, UserUpdate
from club.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

BACKEND_FAILURE_MESSAGE = "Não foi possível concluir a operação. Tente novamente em instantes."
ALREADY_ACTIVE_MESSAGE = "Usuário já está ativo no sistema."
REACTIVATED_MESSAGE = "Cadastro reativado com sucesso! (Senha anterior mantida)"
ORPHAN_LOGIN_MESSAGE = ("Este e-mail já está cadastrado no sistema de login, mas não possui perfil. "
                        "Por favor, utilize a função \"Resetar Senha\" ou contate o suporte.")
INACTIVE_ACCOUNT_MESSAGE = "Esta conta foi desativada. Entre em contato com a administração."
BAD_CREDENTIALS_MESSAGE = "E-mail/telefone ou senha incorretos."
CAPACITY_BELOW_CONFIRMED_MESSAGE = ("A capacidade não pode ser menor que o número de agendamentos "
                                    "confirmados ({}).")

_REJECTION_STATUS: dict[RejectionReason, int] = {
    RejectionReason.FULL: status.HTTP_409_CONFLICT,
    RejectionReason.LOCKED: status.HTTP_403_FORBIDDEN,
    RejectionReason.ALREADY_BOOKED: status.HTTP_409_CONFLICT,
    RejectionReason.UNAVAILABLE: status.HTTP_409_CONFLICT,
}


def placeholder_email(name: str, phone: str, domain: str) -> str:
    """Login email for members registered without one: ``joao.silva.8888@domain``."""
    local = re.sub(r"\s+", ".", name.strip().lower())
    return f"{local}.{phone[-4:]}@{domain}"


class ClubStore:
    """Facade over the entity store, the scheduling rules and the backend."""

    def __init__(self, backend: Backend, *, release_hour: int = 8, timezone: datetime.tzinfo = datetime.timezone.utc,
                 cancellation: str = "hard", default_password: str = "mudar@123",
                 placeholder_email_domain: str = "clubesport.local",
                 placeholder_image_url: str = "https://picsum.photos/400/200",
                 image_storage: Optional[ImageStorage] = None,
                 clock: Optional[Callable[[], datetime.datetime]] = None, ):
        if not 0 <= release_hour <= 23:
            raise ValueError(f"release_hour must be between 0 and 23, got {release_hour}")
        if cancellation not in ("hard", "soft"):
            raise ValueError(f"cancellation must be 'hard' or 'soft', got {cancellation!r}")

        self.backend = backend
        self.entities = EntityStore()
        self.timezone = timezone
        self.cancellation = cancellation
        self.default_password = default_password
        self.placeholder_email_domain = placeholder_email_domain
        self.placeholder_image_url = placeholder_image_url
        self.image_storage = image_storage
        self._clock = clock or (lambda: datetime.datetime.now(self.timezone))
        self._release_hour = release_hour
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, config: Settings, backend: Backend,
                      image_storage: Optional[ImageStorage] = None) -> "ClubStore":
        return cls(backend, release_hour=config.BOOKING_RELEASE_HOUR, timezone=ZoneInfo(config.CLUB_TIMEZONE),
                   cancellation=config.BOOKING_CANCELLATION, default_password=config.DEFAULT_STUDENT_PASSWORD,
                   placeholder_email_domain=config.PLACEHOLDER_EMAIL_DOMAIN,
                   placeholder_image_url=config.PLACEHOLDER_IMAGE_URL, image_storage=image_storage, )

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def now(self) -> datetime.datetime:
        return self._clock()

    @contextmanager
    def _backend_call(self, action: str) -> Iterator[None]:
        try:
            yield
        except BackendError as e:
            logger.error("Backend failure during %s: %s", action, e)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=BACKEND_FAILURE_MESSAGE) from e

    def refresh(self) -> None:
        """Reload every collection from the backend."""
        with self._lock, self._backend_call("refresh"):
            users = [user_from_row(r) for r in self.backend.fetch_all(PROFILES)]
            modalities = [modality_from_row(r) for r in self.backend.fetch_all(MODALITIES)]
            sessions = [session_from_row(r) for r in self.backend.fetch_all(CLASS_SESSIONS)]
            bookings = [booking_from_row(r) for r in self.backend.fetch_all(BOOKINGS)]
            self.entities.replace(users, modalities, sessions, bookings)
        logger.debug("Store refreshed: %d users, %d modalities, %d sessions, %d bookings", len(users),
                     len(modalities), len(sessions), len(bookings))

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self, identifier: str, password: str) -> Token:
        """Sign in with an email or a phone number.

        Raises:
            HTTPException 401: Unknown identifier or wrong password.
            HTTPException 403: Account soft-deleted.
        """
        identifier = identifier.strip()
        unauthorized = HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=BAD_CREDENTIALS_MESSAGE,
                                     headers={"WWW-Authenticate": "Bearer"}, )

        with self._backend_call("login"):
            email = identifier
            if "@" not in identifier:
                by_phone = self.backend.find_one(PROFILES, "phone", identifier)
                if by_phone is None:
                    raise unauthorized
                email = by_phone["email"]

            user_id = self.backend.credentials.sign_in(email, password)
            if user_id is None:
                raise unauthorized

            row = self.backend.find_one(PROFILES, "id", user_id)
            if row is None:
                logger.warning("Login %s has no profile", email)
                raise unauthorized
            user = user_from_row(row)

            if not user.is_active:
                self.backend.credentials.sign_out(user.id)
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=INACTIVE_ACCOUNT_MESSAGE)

        if self.entities.get_user(user.id) is None:
            self.refresh()

        logger.info("User %s signed in", user.id)
        return Token(access_token=create_access_token({"sub": user.id}),
                     must_change_password=user.must_change_password)

    def logout(self, user: User) -> None:
        with self._backend_call("logout"):
            self.backend.credentials.sign_out(user.id)

    def update_password(self, user: User, new_password: str) -> User:
        """Change the user's password and clear the first-login flag."""
        with self._lock:
            with self._backend_call("password update"):
                self.backend.credentials.update_password(user.id, new_password)
            try:
                self.backend.update(PROFILES, user.id, {"must_change_password": False})
            except BackendError as e:
                # The password itself was changed; only the flag is stale.
                logger.error("Password changed for %s but profile flag was not cleared: %s", user.id, e)
            self.refresh()
            return self.entities.get_user(user.id) or user

    def reset_user_password(self, email: str) -> None:
        with self._backend_call("password reset"):
            self.backend.credentials.send_reset_email(email)

    def reset_member_password(self, user_id: str) -> User:
        """Send the reset email to a member's login address."""
        user = self._require_user(user_id)
        self.reset_user_password(user.email)
        return user

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def active_users(self, role: Optional[Role] = None) -> list[User]:
        return self.entities.active_users(role)

    def get_user(self, user_id: str) -> Optional[User]:
        return self.entities.get_user(user_id)

    def _require_user(self, user_id: str) -> User:
        user = self.entities.get_user(user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuário não encontrado.")
        return user

    def register_student(self, data: UserRegistration) -> RegistrationResult:
        return self._register(data, Role.STUDENT)

    def register_teacher(self, data: UserRegistration) -> RegistrationResult:
        return self._register(data, Role.TEACHER)

    def _register(self, data: UserRegistration, role: Role) -> RegistrationResult:
        """Create a member account, or reactivate a soft-deleted one.

        - existing INACTIVE profile with the same email: role restored,
          profile fields overwritten, login left untouched;
        - existing active profile: 409;
        - login without profile: 409 with remediation hint;
        - otherwise: new login (default password unless given) and a
          profile that must change its password on first access.
        """
        email = str(data.email) if data.email else placeholder_email(data.name, data.phone,
                                                                     self.placeholder_email_domain)
        profile_fields = {
            "name": data.name,
            "phone": data.phone,
            "plan_type": data.plan_type.value if data.plan_type else None,
            "observation": data.observation,
        }

        with self._lock:
            with self._backend_call("registration"):
                existing = self.backend.find_one(PROFILES, "email", email)

            if existing is not None:
                if existing["role"] != Role.INACTIVE.value:
                    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ALREADY_ACTIVE_MESSAGE)

                with self._backend_call("reactivation"):
                    self.backend.update(PROFILES, existing["id"],
                                        {**profile_fields, "role": role.value, "previous_role": None})
                logger.info("Reactivated %s as %s", existing["id"], role.value)
                self.refresh()
                return RegistrationResult(success=True, message=REACTIVATED_MESSAGE, reactivated=True,
                                          user=self.entities.get_user(existing["id"]))

            try:
                user_id = self.backend.credentials.sign_up(email, data.password or self.default_password)
            except CredentialAlreadyExists as e:
                logger.warning("Login exists without profile for %s", email)
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=ORPHAN_LOGIN_MESSAGE) from e
            except BackendError as e:
                logger.error("Could not create login for %s: %s", email, e)
                raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                                    detail=BACKEND_FAILURE_MESSAGE) from e

            user = User(id=user_id, email=email, role=role, must_change_password=True, **profile_fields)
            with self._backend_call("profile creation"):
                self.backend.insert(PROFILES, to_row(user))
            logger.info("Registered %s %s", role.value, user_id)
            self.refresh()
            return RegistrationResult(success=True, user=self.entities.get_user(user_id))

    def update_user(self, user_id: str, data: UserUpdate) -> User:
        self._require_user(user_id)
        changes = to_row(data, exclude_unset=True)
        if not changes:
            return self.entities.get_user(user_id)
        with self._lock:
            with self._backend_call("user update"):
                self.backend.update(PROFILES, user_id, changes)
            self.refresh()
            return self.entities.get_user(user_id)

    def delete_user(self, user_id: str, actor: Optional[User] = None) -> None:
        """Soft delete: the profile becomes INACTIVE and keeps its bookings."""
        user = self._require_user(user_id)
        if actor is not None and actor.id == user_id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail="Você não pode desativar a própria conta.")
        if not user.is_active:
            return
        with self._lock:
            with self._backend_call("user deactivation"):
                self.backend.update(PROFILES, user_id, {"role": Role.INACTIVE.value, "previous_role": user.role.value})
            logger.info("Deactivated user %s (was %s)", user_id, user.role.value)
            self.refresh()

    # ------------------------------------------------------------------
    # Modalities
    # ------------------------------------------------------------------

    @property
    def modalities(self) -> list[Modality]:
        return self.entities.modalities

    def _require_modality(self, modality_id: str) -> Modality:
        modality = self.entities.get_modality(modality_id)
        if modality is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Modalidade não encontrada.")
        return modality

    def _store_image(self, data: bytes, filename: str, content_type: Optional[str]) -> str:
        if self.image_storage is None:
            logger.warning("No image storage configured; using placeholder image")
            return self.placeholder_image_url
        with self._backend_call("image upload"):
            return self.image_storage.upload(data, filename, content_type)

    def add_modality(self, data: ModalityCreate, image: Optional[bytes] = None, filename: str = "",
                     content_type: Optional[str] = None) -> Modality:
        if image:
            image_url = self._store_image(image, filename, content_type)
        else:
            image_url = data.image_url or self.placeholder_image_url
        with self._lock:
            with self._backend_call("modality creation"):
                row = self.backend.insert(MODALITIES, {"name": data.name, "description": data.description,
                                                       "image_url": image_url})
            self.refresh()
            return self.entities.get_modality(row["id"])

    def update_modality(self, modality_id: str, data: ModalityUpdate) -> Modality:
        self._require_modality(modality_id)
        changes = to_row(data, exclude_unset=True)
        if not changes:
            return self.entities.get_modality(modality_id)
        with self._lock:
            with self._backend_call("modality update"):
                self.backend.update(MODALITIES, modality_id, changes)
            self.refresh()
            return self.entities.get_modality(modality_id)

    def upload_modality_image(self, modality_id: str, data: bytes, filename: str,
                              content_type: Optional[str] = None) -> Modality:
        self._require_modality(modality_id)
        image_url = self._store_image(data, filename, content_type)
        return self.update_modality(modality_id, ModalityUpdate(image_url=image_url))

    def delete_modality(self, modality_id: str) -> None:
        """Delete a modality that no session references."""
        self._require_modality(modality_id)
        referencing = self.entities.sessions_for_modality(modality_id)
        if referencing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=(f"Não é possível excluir: existem {len(referencing)} aula(s) "
                                        f"desta modalidade. Exclua as aulas primeiro."))
        with self._lock:
            with self._backend_call("modality deletion"):
                self.backend.delete(MODALITIES, modality_id)
            self.refresh()

    # ------------------------------------------------------------------
    # Class sessions
    # ------------------------------------------------------------------

    @property
    def sessions(self) -> list[ClassSession]:
        return self.entities.sessions

    def _require_session(self, session_id: str) -> ClassSession:
        class_session = self.entities.get_session(session_id)
        if class_session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Aula não encontrada.")
        return class_session

    def _localize(self, moment: datetime.datetime) -> datetime.datetime:
        """Naive times are club wall-clock times."""
        return moment.replace(tzinfo=self.timezone) if moment.tzinfo is None else moment

    def add_session(self, data: ClassSessionCreate) -> ClassSession:
        self._require_modality(data.modality_id)
        draft = data.model_copy(update={"start_time": self._localize(data.start_time)})
        with self._lock:
            with self._backend_call("session creation"):
                row = self.backend.insert(CLASS_SESSIONS, to_row(draft))
            self.refresh()
            return self.entities.get_session(row["id"])

    def _capacity_too_low(self, confirmed: int) -> HTTPException:
        return HTTPException(status_code=status.HTTP_409_CONFLICT,
                             detail=CAPACITY_BELOW_CONFIRMED_MESSAGE.format(confirmed))

    def update_session(self, session_id: str, data: ClassSessionUpdate) -> ClassSession:
        """Edit a class.

        Raises:
            HTTPException 404: Unknown session.
            HTTPException 409: Capacity below the CONFIRMED bookings.
        """
        self._require_session(session_id)
        if data.start_time is not None:
            data = data.model_copy(update={"start_time": self._localize(data.start_time)})
        changes = to_row(data, exclude_unset=True)
        if not changes:
            return self.entities.get_session(session_id)
        with self._lock:
            confirmed = self.entities.confirmed_count(session_id)
            if "capacity" in changes and changes["capacity"] < confirmed:
                raise self._capacity_too_low(confirmed)
            with self._backend_call("session update"):
                try:
                    self.backend.update(CLASS_SESSIONS, session_id, changes)
                except CapacityBelowConfirmed:
                    # Bookings arrived since the last refresh
                    self.refresh()
                    raise self._capacity_too_low(self.entities.confirmed_count(session_id)) from None
            self.refresh()
            return self.entities.get_session(session_id)

    def delete_session(self, session_id: str) -> None:
        """Cancel a class; its bookings are deleted with it."""
        self._require_session(session_id)
        with self._lock:
            with self._backend_call("session deletion"):
                self.backend.delete(CLASS_SESSIONS, session_id)
            logger.info("Deleted session %s", session_id)
            self.refresh()

    def generate_sessions(self, spec: RecurrenceSpec, confirm: bool = False) -> list[ClassSession]:
        """Expand *spec* and persist every generated session.

        Raises:
            HTTPException 422: Incomplete specification.
            HTTPException 404: Unknown modality.
            HTTPException 409: More than ``LARGE_BATCH_THRESHOLD`` sessions
                without ``confirm``.
        """
        try:
            drafts = generate(spec, tz=self.timezone)
        except InvalidRecurrenceSpec as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

        self._require_modality(spec.modality_id)

        if len(drafts) > LARGE_BATCH_THRESHOLD and not confirm:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Serão criadas {len(drafts)} aulas. Confirme para continuar.")

        created: list[str] = []
        with self._lock:
            try:
                for draft in drafts:
                    created.append(self.backend.insert(CLASS_SESSIONS, to_row(draft))["id"])
            except BackendError as e:
                logger.error("Session generation failed after %d of %d inserts: %s", len(created), len(drafts), e)
                self._discard_sessions(created)
                raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                                    detail=BACKEND_FAILURE_MESSAGE) from e
            logger.info("Generated %d sessions for modality %s", len(created), spec.modality_id)
            self.refresh()
            return [self.entities.get_session(sid) for sid in created]

    def _discard_sessions(self, session_ids: list[str]) -> None:
        for session_id in session_ids:
            try:
                self.backend.delete(CLASS_SESSIONS, session_id)
            except BackendError as e:
                logger.error("Could not discard generated session %s: %s", session_id, e)

    # ------------------------------------------------------------------
    # Release configuration
    # ------------------------------------------------------------------

    @property
    def booking_release_hour(self) -> int:
        return self._release_hour

    def update_booking_release_hour(self, hour: int) -> int:
        if not 0 <= hour <= 23:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                                detail="O horário de liberação deve estar entre 0 e 23.")
        with self._lock:
            self._release_hour = hour
        logger.info("Booking release hour set to %02d:00", hour)
        return hour

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    @property
    def bookings(self) -> list[Booking]:
        return self.entities.bookings

    def get_session_bookings_count(self, session_id: str) -> int:
        return self.entities.confirmed_count(session_id)

    def _confirmed_booking(self, user_id: str, session_id: str) -> Optional[Booking]:
        return next((b for b in self.entities.bookings_for_session(session_id)
                     if b.user_id == user_id and b.status == BookingStatus.CONFIRMED), None)

    def browse_sessions(self, user: User) -> list[SessionAvailability]:
        """Sessions of today (not started) and tomorrow, with live occupancy."""
        now = self.now()
        rows = []
        for class_session in browsable_sessions(self.entities.sessions, now):
            confirmed = self.entities.confirmed_count(class_session.id)
            modality = self.entities.get_modality(class_session.modality_id)
            mine = self._confirmed_booking(user.id, class_session.id)
            rows.append(SessionAvailability(session=class_session, modality_name=modality.name if modality else None,
                                            confirmed_count=confirmed,
                                            occupancy=occupancy_level(confirmed, class_session.capacity),
                                            locked=(user.role is Role.STUDENT
                                                    and is_locked(class_session, now, self._release_hour)),
                                            booked_by_me=mine is not None, my_booking_id=mine.id if mine else None, ))
        return rows

    def _reject(self, reason: RejectionReason) -> HTTPException:
        return HTTPException(status_code=_REJECTION_STATUS[reason],
                             detail=rejection_message(reason, self._release_hour),
                             headers={"X-Rejection-Reason": reason.value}, )

    def book_session(self, user: User, session_id: str) -> Booking:
        """Reserve a seat for *user*.

        Checked against the snapshot first (browsing window, duplicate,
        capacity, release hour); the backend then enforces capacity
        again, since another client may have taken the last seat.
        """
        with self._lock:
            class_session = self._require_session(session_id)
            now = self.now()

            if user.role is Role.STUDENT and not is_browsable(class_session, now):
                raise self._reject(RejectionReason.UNAVAILABLE)
            if self._confirmed_booking(user.id, session_id) is not None:
                raise self._reject(RejectionReason.ALREADY_BOOKED)

            decision = can_book(class_session, now, self.entities.bookings, self._release_hour, user.role)
            if not decision.admitted:
                logger.debug("Booking of %s by %s rejected: %s", session_id, user.id, decision.reason.value)
                raise self._reject(decision.reason)

            row = {"session_id": session_id, "user_id": user.id, "status": BookingStatus.CONFIRMED.value,
                   "booked_at": now}
            with self._backend_call("booking"):
                try:
                    created = self.backend.insert(BOOKINGS, row)
                except CapacityExceeded:
                    logger.info("Session %s filled up before booking by %s", session_id, user.id)
                    self.refresh()
                    raise self._reject(RejectionReason.FULL) from None
                except RecordNotFound:
                    self.refresh()
                    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND,
                                        detail="Aula não encontrada.") from None

            logger.info("User %s booked session %s", user.id, session_id)
            self.refresh()
            return self.entities.get_booking(created["id"])

    def cancel_booking(self, actor: User, booking_id: str) -> None:
        """Cancel a booking.  Students may only cancel their own."""
        booking = self.entities.get_booking(booking_id)
        if booking is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Agendamento não encontrado.")
        is_admin = actor.role is Role.ADMIN
        if not is_admin and booking.user_id != actor.id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                                detail="Você só pode cancelar seus próprios agendamentos.")

        with self._lock:
            with self._backend_call("booking cancellation"):
                if self.cancellation == "hard":
                    self.backend.delete(BOOKINGS, booking_id)
                else:
                    cancelled = BookingStatus.CANCELLED_BY_ADMIN if is_admin else BookingStatus.CANCELLED_BY_STUDENT
                    self.backend.update(BOOKINGS, booking_id, {"status": cancelled.value})
            logger.info("Booking %s cancelled by %s", booking_id, actor.id)
            self.refresh()

    def my_bookings(self, user: User) -> list[Booking]:
        """The user's bookings, most recent first."""
        return sorted(self.entities.bookings_for_user(user.id), key=lambda b: b.booked_at, reverse=True)
