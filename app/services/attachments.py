"""
Filesystem storage for expense receipts.
"""

import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import logger

CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class StoredAttachment:
    stored_name: str
    original_name: str


class AttachmentStore:
    """Stores uploads under the configured upload directory."""

    def __init__(self, directory: Optional[str] = None, max_size: Optional[int] = None):
        uploads = settings.uploads
        self.directory = Path(directory or uploads.directory)
        self.max_size = max_size or uploads.max_size
        self.allowed_extensions = set(uploads.allowed_extensions)

    def _extension(self, filename: str) -> str:
        suffix = Path(filename).suffix.lower()
        if suffix.lstrip(".") not in self.allowed_extensions:
            raise ValidationError("Only image and PDF files are allowed!")
        return suffix

    @staticmethod
    def _unique_name(suffix: str) -> str:
        millis = int(time.time() * 1000)
        return f"attachment-{millis}-{secrets.randbelow(10**9)}{suffix}"

    async def save(self, upload: UploadFile) -> StoredAttachment:
        """
        Write an uploaded file to disk under a generated name.

        Args:
            upload: The multipart file

        Returns:
            The stored and original file names

        Raises:
            ValidationError: If the type is not allowed or the file is too large
        """
        original_name = Path(upload.filename or "").name
        suffix = self._extension(original_name)

        self.directory.mkdir(parents=True, exist_ok=True)
        stored_name = self._unique_name(suffix)
        file_path = self.directory / stored_name

        written = 0
        with open(file_path, "wb") as buffer:
            while chunk := await upload.read(CHUNK_SIZE):
                written += len(chunk)
                if written > self.max_size:
                    break
                buffer.write(chunk)

        if written > self.max_size:
            file_path.unlink(missing_ok=True)
            logger.warning(f"Rejected upload {original_name}: larger than {self.max_size} bytes")
            raise ValidationError(f"File too large (max {self.max_size // (1024 * 1024)}MB)")

        logger.info(f"Stored attachment {original_name} as {stored_name} ({written} bytes)")
        return StoredAttachment(stored_name=stored_name, original_name=original_name)

    def path_for(self, stored_name: str) -> Path:
        """
        Resolve a stored name to its path inside the upload directory.

        Raises:
            NotFoundError: For names that would escape the directory
        """
        if not stored_name or Path(stored_name).name != stored_name or stored_name in (".", ".."):
            raise NotFoundError("File not found")
        root = self.directory.resolve()
        path = (root / stored_name).resolve()
        if path.parent != root:
            raise NotFoundError("File not found")
        return path

    def delete(self, stored_name: str) -> None:
        """Remove a stored file if it is still there."""
        try:
            self.path_for(stored_name).unlink(missing_ok=True)
            logger.info(f"Removed attachment {stored_name}")
        except (NotFoundError, OSError) as e:
            logger.error(f"Could not remove attachment {stored_name}: {e}")
