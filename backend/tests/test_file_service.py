"""
Rent The Moment Backend — Image Storage Service Unit Tests
=========================================================

What:  FileService validation (extension, size, MIME), storage layout,
       serving-path resolution and deletion.
How:   Every test gets a FileService rooted in its own tmp directory.

Test Strategy:
    ✅ Allowed extensions (.jpg, .jpeg, .png, .webp), case-insensitive
    ✅ Rejected extensions (.gif, .pdf, .exe, none)
    ✅ Size limits (empty, over MAX_FILE_SIZE, lying Content-Length)
    ✅ MIME sniffing rejects a renamed non-image
    ✅ Stored under YYYY/MM/DD/<uuid>.<ext> and exposed at /api/files/...
    ✅ Path traversal on resolve / delete
"""

import re
from pathlib import Path
from unittest.mock import patch

import pytest

from rentmoment.config import settings
from rentmoment.exceptions import NotFoundError, ValidationFailure
from rentmoment.services.file_service import FileService


def sniffed_as(mime_type: str):
    """Pin libmagic's answer; skips where python-magic (libmagic) is not installed."""
    pytest.importorskip("magic")
    return patch("magic.from_buffer", return_value=mime_type)


class TestFileValidation:
    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.service = FileService(storage_root=temp_storage)

    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("name", ["photo.jpg", "photo.jpeg", "photo.png", "photo.webp"])
    def test_allowed_extensions(self, name):
        assert self.service.validate_extension(name) == Path(name).suffix

    def test_extension_check_is_case_insensitive(self):
        assert self.service.validate_extension("photo.JPG") == ".jpg"
        assert self.service.validate_extension("photo.WebP") == ".webp"

    @pytest.mark.parametrize("name", ["animation.gif", "document.pdf", "malware.exe", "noextension"])
    def test_rejected_extensions(self, name):
        with pytest.raises(ValidationFailure, match="not supported"):
            self.service.validate_extension(name)

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_within_limit(self):
        self.service.validate_size(None, 1000)

    def test_size_at_limit(self):
        self.service.validate_size(settings.max_file_size, settings.max_file_size)

    def test_size_over_limit(self):
        with pytest.raises(ValidationFailure, match="exceeds"):
            self.service.validate_size(None, settings.max_file_size + 1)

    def test_content_length_header_checked_first(self):
        with pytest.raises(ValidationFailure, match="exceeds"):
            self.service.validate_size(settings.max_file_size + 1, 10)

    def test_empty_file_rejected(self):
        with pytest.raises(ValidationFailure, match="empty"):
            self.service.validate_size(None, 0)

    # ── MIME Validation ───────────────────────────────────────────────────

    def test_mime_detected_from_content(self, sample_png_bytes):
        with sniffed_as("image/png"):
            assert self.service.validate_mime_type(sample_png_bytes, "photo.png") == "image/png"

    def test_renamed_non_image_rejected(self):
        with sniffed_as("application/x-dosexec"):
            with pytest.raises(ValidationFailure, match="not supported"):
                self.service.validate_mime_type(b"MZ\x90\x00", "malware.jpg")


class TestStorage:
    @pytest.fixture(autouse=True)
    def _service(self, temp_storage):
        self.root = Path(temp_storage).resolve()
        self.service = FileService(storage_root=temp_storage)

    @pytest.mark.asyncio
    async def test_save_image_stores_under_date_directory(self, sample_image_bytes):
        with sniffed_as("image/jpeg"):
            stored = await self.service.save_image("look.JPG", sample_image_bytes)

        assert re.fullmatch(r"\d{4}/\d{2}/\d{2}/[0-9a-f-]{36}\.jpg", stored.path)
        assert stored.url == f"/api/files/{stored.path}"
        assert stored.filename == "look.JPG"
        assert stored.size == len(sample_image_bytes)
        assert stored.content_type == "image/jpeg"
        assert (self.root / stored.path).read_bytes() == sample_image_bytes

    @pytest.mark.asyncio
    async def test_invalid_upload_writes_nothing(self):
        with pytest.raises(ValidationFailure):
            await self.service.save_image("notes.txt", b"hello")
        assert list(self.root.rglob("*.*")) == []

    def test_resolve_existing_file(self):
        target = self.root / "2024" / "01" / "15" / "a.png"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"x")
        assert self.service.resolve("2024/01/15/a.png") == target

    @pytest.mark.parametrize("path", ["../secret.txt", "2024/../../etc/passwd", "missing.png"])
    def test_resolve_rejects_traversal_and_missing(self, path, tmp_path):
        (tmp_path / "secret.txt").write_text("top secret")
        with pytest.raises(NotFoundError):
            self.service.resolve(path)

    @pytest.mark.asyncio
    async def test_delete_file(self):
        target = self.root / "2024" / "01" / "15" / "b.webp"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"x")

        await self.service.delete_file("2024/01/15/b.webp")
        assert not target.exists()

    @pytest.mark.asyncio
    async def test_delete_missing_file(self):
        with pytest.raises(NotFoundError):
            await self.service.delete_file("2024/01/15/nope.jpg")
