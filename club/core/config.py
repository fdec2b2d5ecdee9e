"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (.env file).
"""

from typing import List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Project Info
    PROJECT_NAME: str = "Club Scheduler"
    VERSION: str = "0.1.0"
    PROJECT_URL: str = ""

    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Backend (relational store). Both must be set for live mode,
    # otherwise the app runs in local-only mode with fixture data.
    BACKEND_URL: str = ""
    BACKEND_KEY: str = ""

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Club rules
    CLUB_TIMEZONE: str = "America/Sao_Paulo"
    BOOKING_RELEASE_HOUR: int = Field(8, ge=0, le=23)
    BOOKING_CANCELLATION: Literal["hard", "soft"] = "hard"
    DEFAULT_STUDENT_PASSWORD: str = "mudar@123"
    PLACEHOLDER_EMAIL_DOMAIN: str = "clubesport.local"
    PLACEHOLDER_IMAGE_URL: str = "https://picsum.photos/400/200"

    # Modality cover images (optional)
    MEDIA_ROOT: str = ""
    MEDIA_BASE_URL: str = "/media"

    # Reminders
    SCHEDULER_ENABLED: bool = True
    REMINDER_INTERVAL_SECONDS: int = 60
    REMINDER_LEAD_MINUTES: int = 60

    # First admin account, created by scripts/init_db.py
    SEED_ADMIN_EMAIL: str = "admin@clube.com"
    SEED_ADMIN_PASSWORD: str = ""
    SEED_ADMIN_NAME: str = "Admin Master"

    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def DATABASE_URL(self) -> Optional[str]:
        """Full SQLAlchemy URL with the access key as password.

        ``None`` when the backend is not configured or the URL is malformed.
        """
        if not self.BACKEND_URL or not self.BACKEND_KEY:
            return None
        try:
            url = make_url(self.BACKEND_URL)
        except ArgumentError:
            return None
        return url.set(password=self.BACKEND_KEY).render_as_string(hide_password=False)


# Global settings instance
settings = Settings()
