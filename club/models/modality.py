"""Modality database model."""

from sqlmodel import Field, SQLModel


class ModalityRow(SQLModel, table=True):
    """Sport offering (``modalities`` table)."""

    __tablename__ = "modalities"

    id: str = Field(primary_key=True, max_length=64)
    name: str = Field(nullable=False, max_length=120)
    description: str = Field(default="", max_length=2000)
    image_url: str = Field(default="", max_length=1000)
