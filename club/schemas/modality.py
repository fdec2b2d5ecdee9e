"""Modality API schemas."""

from typing import Optional

from pydantic import Field

from club.schemas.base import CamelModel


class Modality(CamelModel):
    """A sport offered by the club."""

    id: str
    name: str
    description: str = ""
    image_url: str = ""


class ModalityCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field("", max_length=2000)
    image_url: Optional[str] = None


class ModalityUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = Field(None, max_length=2000)
    image_url: Optional[str] = None
