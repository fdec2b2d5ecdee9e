"""Pydantic schemas for request/response validation."""

from club.schemas.booking import Booking, BookingCreate, BookingStatus
from club.schemas.class_session import (ClassSession, ClassSessionCreate, ClassSessionDraft, ClassSessionUpdate,
                                        GenerateSessionsRequest, GenerateSessionsResult, OccupancyLevel,
                                        RecurrenceSpec, SessionAvailability, )
from club.schemas.modality import Modality, ModalityCreate, ModalityUpdate
from club.schemas.notification import Notification, NotificationKind
from club.schemas.settings import BookingReleaseHour
from club.schemas.user import (LoginRequest, PasswordChange, PasswordResetRequest, PlanType, RegistrationResult, Role,
                               Token, User, UserMe, UserRegistration, UserUpdate, )

__all__ = [
    "Booking",
    "BookingCreate",
    "BookingStatus",
    "ClassSession",
    "ClassSessionCreate",
    "ClassSessionDraft",
    "ClassSessionUpdate",
    "GenerateSessionsRequest",
    "GenerateSessionsResult",
    "OccupancyLevel",
    "RecurrenceSpec",
    "SessionAvailability",
    "Modality",
    "ModalityCreate",
    "ModalityUpdate",
    "Notification",
    "NotificationKind",
    "BookingReleaseHour",
    "LoginRequest",
    "PasswordChange",
    "PasswordResetRequest",
    "PlanType",
    "RegistrationResult",
    "Role",
    "Token",
    "User",
    "UserMe",
    "UserRegistration",
    "UserUpdate",
]
