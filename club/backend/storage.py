"""
Modality cover image storage.

Optional collaborator: takes the uploaded bytes and returns a public URL.
Without one, modalities fall back to a placeholder image.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from club.backend.base import BackendError

logger = logging.getLogger(__name__)

_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png", "image/webp": ".webp", "image/gif": ".gif"}


class ImageStorage(ABC):
    @abstractmethod
    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Store *data* and return its public URL."""


class DirectoryImageStorage(ImageStorage):
    """Writes images under ``root`` and serves them from ``base_url``."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        suffix = _EXTENSIONS.get(content_type or "") or Path(filename).suffix.lower() or ".bin"
        name = f"modalities/{uuid.uuid4().hex}{suffix}"
        target = self.root / name
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise BackendError(f"could not store image: {e}") from e
        logger.info("Stored modality image %s (%d bytes)", name, len(data))
        return f"{self.base_url}/{name}"
