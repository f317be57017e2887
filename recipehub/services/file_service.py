"""
RecipeHub Backend — Recipe Image Storage
==========================================

What:  Validates and stores uploaded recipe images.
How:   Extension and declared content type are checked, size is bounded,
       python-magic confirms the bytes really are that image type,
       then they are written with aiofiles to a date-organized tree
       under a generated filename.
Who:   Called by RecipeService.attach_image.

Directory Structure:
    uploads/
    └── 2024/
        └── 01/
            └── 15/
                ├── a1b2c3d4-....jpg
                └── e5f6g7h8-....png

The value stored on the recipe is the public path served by
GET /uploads/{path}, e.g. "/uploads/2024/01/15/a1b2c3d4-....jpg".
Filenames never contain user input, which rules out path traversal.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import magic

from recipehub.config import settings
from recipehub.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

# Detected MIME type → extensions that may carry it
ALLOWED_MIME_TYPES = {
    "image/png": {".png"},
    "image/jpeg": {".jpg", ".jpeg"},
    "image/gif": {".gif"},
    "image/webp": {".webp"},
}

PUBLIC_PREFIX = "/uploads"


class FileService:
    """Manages upload validation, storage and cleanup for recipe images."""

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension (lowercase with dot)."""
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str]) -> None:
        if content_type and not content_type.startswith("image/"):
            raise ValidationError(
                message="Only image uploads are allowed",
                field="image",
                context={"content_type": content_type},
            )

    def validate_mime_type(self, content: bytes, extension: str) -> str:
        """
        Validate the real type of the upload by inspecting its leading bytes.

        The declared content type and the filename are client input; the
        file signature is not. The detected type must be an allowed image
        type and must agree with the extension the file is stored under.

        Returns:
            Detected MIME type string (e.g., "image/jpeg")

        Raises:
            ValidationError: content is not an allowed image or does not
                match its extension
            FileStorageError: libmagic could not inspect the content
        """
        try:
            mime_type = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        extensions = ALLOWED_MIME_TYPES.get(mime_type)
        if extensions is None:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid image."
                ),
                field="image",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        if extension not in extensions:
            raise ValidationError(
                message=f"File content ({mime_type}) does not match extension '{extension}'",
                field="image",
                context={"detected_mime": mime_type, "extension": extension},
            )
        return mime_type

    def validate_size(self, size: int) -> None:
        if size == 0:
            raise ValidationError(message="Uploaded file is empty", field="image")
        if size > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) as YYYY/MM/DD/<uuid><ext>."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        absolute_path, relative_path = self._generate_storage_path(extension)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Validate an upload and store it.

        Cheap checks run first: extension, declared type, size, then the
        content signature, then the write.

        Returns:
            The public path to record on the recipe ("/uploads/...").
        """
        ext = self.validate_extension(filename)
        self.validate_content_type(content_type)
        self.validate_size(len(content))
        self.validate_mime_type(content, ext)
        _, relative_path = await self.store_file(content, ext)
        return f"{PUBLIC_PREFIX}/{relative_path}"

    def resolve_public_path(self, relative_path: str) -> Path:
        """
        Map a path below /uploads back to a file inside storage_root.

        Raises:
            ValidationError: the path escapes storage_root
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", field="path")
        return full_path

    async def cleanup_file(self, public_path: str) -> None:
        """
        Best-effort removal of an image whose recipe update failed.
        Failures are logged, never raised.

        Replaced images are never removed: forks copy the image path and
        may still point at the old file.
        """
        if not public_path.startswith(f"{PUBLIC_PREFIX}/"):
            return
        try:
            path = self.resolve_public_path(public_path[len(PUBLIC_PREFIX) + 1:])
            if path.exists():
                os.remove(path)
                logger.info("Removed orphaned image: %s", path.name)
        except (OSError, ValidationError) as e:
            logger.warning("Failed to clean up file %s: %s", public_path, str(e))


file_service = FileService()
