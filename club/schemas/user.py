"""
User API schemas.

Pydantic models for profiles, registration and authentication.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from club.schemas.base import CamelModel


class Role(str, Enum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    INACTIVE = "INACTIVE"


class PlanType(str, Enum):
    WELLHUB = "Wellhub"
    TOTALPASS = "Totalpass"
    MENSALISTA = "Mensalista"
    OUTRO = "Outro"


def role_label(role: Role) -> str:
    """Human-readable label shown next to the user's name."""
    if role is Role.ADMIN:
        return "Administrador"
    elif role is Role.TEACHER:
        return "Professor"
    elif role is Role.STUDENT:
        return "Aluno"
    elif role is Role.INACTIVE:
        return "Inativo"
    raise ValueError(f"Unknown role: {role!r}")


def role_home_path(role: Role) -> str:
    """Landing route of the presentation layer for each role."""
    if role is Role.ADMIN:
        return "/admin"
    elif role is Role.TEACHER:
        return "/teacher"
    elif role is Role.STUDENT:
        return "/student"
    elif role is Role.INACTIVE:
        return "/login"
    raise ValueError(f"Unknown role: {role!r}")


class User(CamelModel):
    """A club member profile."""

    id: str
    name: str
    email: str
    role: Role
    phone: Optional[str] = None
    plan_type: Optional[PlanType] = None
    observation: Optional[str] = None
    must_change_password: bool = False
    # Last real role, kept while the account is soft-deleted
    previous_role: Optional[Role] = None

    @property
    def is_active(self) -> bool:
        return self.role is not Role.INACTIVE


class UserRegistration(CamelModel):
    """Admin form for creating a student or teacher account."""

    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=4, max_length=32)
    plan_type: Optional[PlanType] = None
    observation: Optional[str] = Field(None, max_length=1000)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)


class RegistrationResult(CamelModel):
    success: bool = True
    message: Optional[str] = None
    reactivated: bool = False
    user: Optional[User] = None


class UserUpdate(CamelModel):
    """Profile fields an admin may edit. Unset fields are left untouched.

    Role changes go through deactivation and registration only.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    plan_type: Optional[PlanType] = None
    observation: Optional[str] = Field(None, max_length=1000)


class UserMe(CamelModel):
    user: User
    role_label: str
    home_path: str


# Authentication
class LoginRequest(CamelModel):
    """Login with an email address or a phone number."""

    identifier: str
    password: str


class PasswordChange(CamelModel):
    new_password: str = Field(..., min_length=6)


class PasswordResetRequest(CamelModel):
    email: str


class Token(BaseModel):
    """Schema for JWT token response."""

    access_token: str
    token_type: str = "bearer"
    must_change_password: bool = False
