"""
Photo Store - local uploads directory for report photos.
"""

import logging
import mimetypes
import os
import uuid
from typing import Tuple

from civicwatch.core.exceptions import PhotoStorageError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


class LocalPhotoStore:
    """
    Stores uploaded photos under uploads_dir with random file names.

    Photos are served back under url_prefix by the API.
    """

    def __init__(self, uploads_dir: str, url_prefix: str = "/uploads", max_bytes: int = 5 * 1024 * 1024):
        self.uploads_dir = uploads_dir
        self.url_prefix = url_prefix.rstrip("/")
        self.max_bytes = max_bytes

    def save(self, content: bytes, original_filename: str = "") -> Tuple[str, str]:
        """
        Write a photo to disk.

        Returns:
            (filesystem path, public URL)

        Raises:
            PhotoStorageError: Empty, oversized, non-image or unwritable upload
        """
        if not content:
            raise PhotoStorageError("Photo is required")
        if len(content) > self.max_bytes:
            raise PhotoStorageError(f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB")

        extension = os.path.splitext(original_filename or "")[1].lower() or ".jpg"
        if extension not in ALLOWED_EXTENSIONS:
            raise PhotoStorageError("Only image files are allowed")

        filename = f"{uuid.uuid4().hex}{extension}"
        path = os.path.join(self.uploads_dir, filename)
        try:
            os.makedirs(self.uploads_dir, exist_ok=True)
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise PhotoStorageError(f"Failed to store photo: {e}") from e

        logger.info(f"Photo saved to: {path}")
        return path, f"{self.url_prefix}/{filename}"

    def read(self, path: str) -> bytes:
        """
        Raises:
            PhotoStorageError: If the photo cannot be read
        """
        if not path:
            raise PhotoStorageError("Report has no stored photo")
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise PhotoStorageError(f"Cannot read photo {path}: {e}") from e

    @staticmethod
    def mime_type(path: str) -> str:
        guessed, _ = mimetypes.guess_type(path)
        return guessed or "image/jpeg"

    def delete(self, path: str) -> None:
        """Remove a stored photo; a missing file is not an error."""
        try:
            os.remove(path)
            logger.info(f"Photo removed: {path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove photo {path}: {e}")
