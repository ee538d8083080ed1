"""
NotebookHub Backend — File Storage Service
===========================================

What:  Handles PDF upload validation, storage, lookup and cleanup.
Why:   Centralizes all file system operations with security checks.
How:   Validates extension, size and content signature, stores in
       date-organized directories under UUID filenames.
Who:   Called by DocumentService (upload/delete) and the /uploads route.

Security Model:
    1. Extension check:   only `.pdf`
    2. Size check:        Content-Length header first, then a bounded chunked
                          read, so an oversized body is never fully buffered
    3. Signature check:   libmagic (python-magic) must report application/pdf
    4. UUID filename:     no user input reaches the file system path
    5. Locator resolution refuses anything that escapes STORAGE_ROOT

Locators:
    Documents store a public locator, not a disk path:
        /uploads/2024/01/15/a1b2c3d4-....pdf
    resolve_locator() maps it back to STORAGE_ROOT/2024/01/15/a1b2c3d4-....pdf.
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from fastapi import UploadFile

from notebookhub.config import settings
from notebookhub.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = {"application/pdf": ".pdf"}
ALLOWED_EXTENSIONS = {".pdf"}

UPLOADS_PREFIX = "/uploads"

# Chunk size used when reading multipart bodies (1MB)
READ_CHUNK_SIZE = 1024 * 1024


class FileService:
    """
    Manages the stored-PDF lifecycle.

    Directory Structure:
        uploads/
        └── 2024/
            └── 01/
                └── 15/
                    └── a1b2c3d4-5678-....pdf
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            storage_root: Override the storage path (used in tests).
            max_file_size: Override the byte limit (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_file_size = max_file_size or settings.max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Validate file extension (first line of defense).

        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=f"File type '{ext or filename}' is not supported. Please upload a PDF file.",
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def _too_large(self, size: int) -> ValidationError:
        max_mb = self.max_file_size / (1024 * 1024)
        return ValidationError(
            message=f"File size exceeds maximum of {max_mb:.0f}MB. Please upload a smaller PDF.",
            field="file",
            context={"max_size": self.max_file_size, "size": size},
        )

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Validate file size against the configured maximum.

        Args:
            content_length: Size reported by the client (may be None or wrong)
            actual_size: Actual byte count of the uploaded file

        Raises:
            ValidationError for empty or oversized files
        """
        if content_length and content_length > self.max_file_size:
            raise self._too_large(content_length)
        if actual_size > self.max_file_size:
            raise self._too_large(actual_size)
        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="file")

    def _detect_mime_type(self, file_content: bytes) -> str:
        """Reads the file signature with libmagic."""
        try:
            import magic

            return magic.from_buffer(file_content[:2048], mime=True)
        except Exception as e:
            # Covers a missing libmagic shared library as well as detection errors
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

    def validate_mime_type(self, file_content: bytes) -> Optional[str]:
        """
        Validate the real content type by inspecting the file header.

        Skipped (returns None) when VERIFY_FILE_SIGNATURE is off.

        Raises:
            ValidationError if the bytes are not a PDF
        """
        if not settings.verify_file_signature:
            return None

        mime_type = self._detect_mime_type(file_content)
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=f"File content type '{mime_type}' is not supported. The file must be a valid PDF.",
                field="file",
                context={"detected_mime": mime_type},
            )
        return mime_type

    # ── Reading uploads ───────────────────────────────────────────────────

    async def read_upload(self, upload: UploadFile) -> bytes:
        """
        Read an uploaded file with a hard size bound.

        The declared size is checked before any read. The body is then
        consumed in chunks and rejected as soon as it passes the limit, so a
        client that under-reports its size still cannot make us buffer more
        than max_file_size + one chunk.
        """
        if upload.size is not None and upload.size > self.max_file_size:
            raise self._too_large(upload.size)

        chunks = []
        total = 0
        while True:
            chunk = await upload.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            total += len(chunk)
            if total > self.max_file_size:
                raise self._too_large(total)
            chunks.append(chunk)
        return b"".join(chunks)

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Generate a unique, date-organized file path.

        Returns: Tuple of (absolute_path, relative_path_from_storage_root).
        """
        now = datetime.now(timezone.utc)
        date_dir = now.strftime("%Y/%m/%d")
        unique_name = f"{uuid.uuid4()}{extension}"

        relative_path = f"{date_dir}/{unique_name}"
        return self.storage_root / relative_path, relative_path

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to disk.

        Returns: Tuple of (absolute_path, locator).
        Raises:  FileStorageError if directory creation or file write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded PDF. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        locator = f"{UPLOADS_PREFIX}/{relative_path}"
        logger.info("File stored: %s (%d bytes)", locator, len(content))
        return str(absolute_path), locator

    def resolve_locator(self, locator: str) -> Path:
        """
        Map a stored locator (or a path relative to the storage root) back to
        an absolute path inside STORAGE_ROOT.

        Raises:
            ValidationError on path traversal attempts
        """
        relative = locator
        if relative.startswith(UPLOADS_PREFIX + "/"):
            relative = relative[len(UPLOADS_PREFIX) + 1:]
        relative = relative.lstrip("/")

        full_path = (self.storage_root / relative).resolve()
        if full_path != self.storage_root and self.storage_root not in full_path.parents:
            raise ValidationError(message="Invalid file path", context={"locator": locator})
        return full_path

    def open_stored_file(self, locator: str) -> Path:
        """Resolve a locator to an existing stored PDF or raise NotFoundError."""
        full_path = self.resolve_locator(locator)
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=locator)
        return full_path

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a file from storage.

        When:    After a document is deleted, or when persisting a new
                 document fails after its file was written.
        Error handling:
            Best-effort. A missing file is fine; other failures are logged
            and left for manual cleanup.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def remove_by_locator(self, locator: str) -> None:
        """Background-task entry point: delete the file behind a locator."""
        try:
            full_path = self.resolve_locator(locator)
        except ValidationError:
            logger.warning("Refusing to remove file outside storage root: %s", locator)
            return
        await self.cleanup_file(str(full_path))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> Tuple[str, str]:
        """
        Complete file validation and storage pipeline.

        Validation order (cheapest first):
            1. Extension check
            2. Size check (empty / oversized)
            3. Content signature check
            4. Store file

        Returns: Tuple of (absolute_path, locator_for_db).
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content)
        return await self.store_file(content, ext)


file_service = FileService()
