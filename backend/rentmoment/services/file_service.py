"""
Rent The Moment Backend — Image Storage Service
==============================================

What:  Validates, stores, serves and deletes uploaded product/category images.
How:   Checks run cheapest first; the file is written with async I/O under a
       date-organized directory with a UUID name, and is served back at
       /api/files/<relative path>.

Validation order:
    1. Extension    (.jpg .jpeg .png .webp)
    2. Size         (Content-Length hint, then actual bytes vs MAX_FILE_SIZE)
    3. MIME type    (magic bytes via python-magic; a renamed .exe is rejected)
    4. Store        (YYYY/MM/DD/<uuid>.<ext>)

Path safety:
    Stored names never contain client input. Paths coming back in from the
    URL (serve / delete) are resolved and must stay inside the storage root.

Directory Structure:
    storage/
    └── 2024/
        └── 01/
            └── 15/
                ├── a1b2c3d4-5678.jpg
                └── e5f6g7h8-9012.webp
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os

from rentmoment.config import settings
from rentmoment.exceptions import FileStorageError, NotFoundError, ValidationFailure
from rentmoment.schemas.upload import UploadedFile

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/api/files/"

ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

# Used only when libmagic is not installed
EXTENSION_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


class FileService:
    """
    Owns everything under STORAGE_ROOT.

    Args:
        storage_root: override the configured root (tests point this at a tmp dir)
    """

    def __init__(self, storage_root: Optional[str] = None):
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension (lowercase, with dot)."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationFailure(
                message=(
                    f"File type '{ext or 'unknown'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="image",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Content-Length is checked first so oversized uploads are refused
        before the body is read; actual size catches clients that lie.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if content_length and content_length > settings.max_file_size:
            raise ValidationFailure(
                message=f"File size exceeds maximum of {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size == 0:
            raise ValidationFailure(message="Uploaded file is empty.", field="image")

        if actual_size > settings.max_file_size:
            raise ValidationFailure(
                message=(
                    f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds "
                    f"maximum of {max_mb:.0f}MB."
                ),
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes, filename: str) -> str:
        """Detect the real type from the file's magic bytes."""
        try:
            import magic
            mime_type = magic.from_buffer(file_content[:2048], mime=True)
        except ImportError:
            logger.warning(
                "python-magic not available; falling back to extension-based type detection. "
                "Install libmagic for production security."
            )
            mime_type = EXTENSION_MIME_TYPES.get(
                Path(filename).suffix.lower(), "application/octet-stream"
            )
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationFailure(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    "Only JPEG, PNG and WebP images are allowed."
                ),
                field="image",
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    # ── Paths ─────────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, relative_path) for a new YYYY/MM/DD/<uuid><ext> file."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        relative_path = f"{date_dir}/{uuid.uuid4()}{extension}"
        return self.storage_root / relative_path, relative_path

    def resolve(self, relative_path: str) -> Path:
        """
        Map a client-supplied relative path to a file under the storage root.

        Raises:
            NotFoundError: path escapes the root or no such file
        """
        candidate = (self.storage_root / relative_path.lstrip("/")).resolve()
        if self.storage_root not in candidate.parents or not candidate.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return candidate

    def public_url(self, relative_path: str) -> str:
        return f"{PUBLIC_PREFIX}{relative_path}"

    # ── Storage ───────────────────────────────────────────────────────────

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

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return str(absolute_path), relative_path

    async def save_image(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> UploadedFile:
        """Full pipeline: extension → size → MIME → store."""
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        mime_type = self.validate_mime_type(content, filename)
        _, relative_path = await self.store_file(content, ext)

        return UploadedFile(
            url=self.public_url(relative_path),
            path=relative_path,
            filename=filename,
            size=len(content),
            content_type=mime_type,
        )

    async def delete_file(self, relative_path: str) -> None:
        """
        Delete a stored file.

        Raises:
            NotFoundError:    no such file (or the path escapes the root)
            FileStorageError: the OS refused the delete
        """
        path = self.resolve(relative_path)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            raise NotFoundError(resource="file", resource_id=relative_path)
        except OSError as e:
            logger.error("Failed to delete file %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to delete file. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )
        logger.info("File deleted: %s", relative_path)


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
