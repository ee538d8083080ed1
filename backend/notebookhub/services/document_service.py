"""
NotebookHub Backend — Document Service (Business Logic)
========================================================

What:  All operations on shared PDFs: listing, upload, moderation, edits,
       deletion and view/download counters.
Why:   Keeps business rules independent of HTTP concerns.
How:   Stateless; every method receives the request's AsyncSession and
       returns response models built from freshly loaded rows.

Counter Semantics:
    track_view / track_download issue one atomic statement:
        UPDATE pdf_documents SET views = views + 1, updated_at = :now
        WHERE id = :id RETURNING views
    The database serializes concurrent increments on the same row, so N
    successful calls always add exactly N. There is no deduplication per
    client and no rate limiting.

Invariants enforced here:
    - uploads start unapproved with zero counters, file_size = payload length
    - approval is one-way and idempotent
    - edits touch only title/author; updated_at strictly increases
    - public listings never include unapproved documents
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import String, asc, cast, desc, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notebookhub.exceptions import DatabaseError, NotFoundError, ValidationError
from notebookhub.models.document import NoteDocument, utcnow
from notebookhub.schemas.document import (
    ApprovalStatus,
    DocumentResponse,
    DocumentSort,
    DocumentUpdate,
)
from notebookhub.services.file_service import file_service

logger = logging.getLogger(__name__)

RESOURCE = "PDF"

SORT_ORDERS = {
    DocumentSort.CREATED_AT_DESC: (desc(NoteDocument.created_at),),
    DocumentSort.CREATED_AT_ASC: (asc(NoteDocument.created_at),),
    DocumentSort.TITLE_ASC: (asc(func.lower(NoteDocument.title)), desc(NoteDocument.created_at)),
    DocumentSort.TITLE_DESC: (desc(func.lower(NoteDocument.title)), desc(NoteDocument.created_at)),
    DocumentSort.FILE_SIZE_ASC: (asc(NoteDocument.file_size), desc(NoteDocument.created_at)),
    DocumentSort.FILE_SIZE_DESC: (desc(NoteDocument.file_size), desc(NoteDocument.created_at)),
}


def to_response(document: NoteDocument) -> DocumentResponse:
    """Build the API representation of a stored document."""
    return DocumentResponse(
        id=document.id,
        title=document.title,
        author=document.author,
        file_url=document.file_ref,
        file_size=document.file_size,
        is_approved=document.is_approved,
        views=document.views,
        downloads=document.downloads,
        created_at=as_utc(document.created_at),
        updated_at=as_utc(document.updated_at),
    )


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def next_timestamp(previous: Optional[datetime]) -> datetime:
    """Current UTC time, bumped past `previous` if the clock has not advanced."""
    now = utcnow()
    if previous is None:
        return now
    previous = as_utc(previous)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _clean_text(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(message=f"{field.capitalize()} is required.", field=field)
    if len(cleaned) > 255:
        raise ValidationError(message=f"{field.capitalize()} must be at most 255 characters.", field=field)
    return cleaned


class DocumentService:
    """
    Business logic layer for shared PDFs.

    Error Handling Strategy:
        Application exceptions propagate unchanged. SQLAlchemy errors are
        logged with context and re-raised as DatabaseError (generic message).
    """

    # ── Queries ───────────────────────────────────────────────────────────

    def _build_list_query(
        self,
        search: Optional[str],
        sort: DocumentSort,
        approved: Optional[bool],
    ):
        query = select(NoteDocument)

        if approved is not None:
            query = query.where(NoteDocument.is_approved == approved)

        term = (search or "").strip().lower()
        if term:
            query = query.where(
                or_(
                    func.lower(NoteDocument.title).contains(term, autoescape=True),
                    func.lower(NoteDocument.author).contains(term, autoescape=True),
                    cast(NoteDocument.file_size, String).contains(term, autoescape=True),
                )
            )

        return query.order_by(*SORT_ORDERS[sort])

    async def _fetch_list(self, db: AsyncSession, query, operation: str) -> List[DocumentResponse]:
        try:
            result = await db.execute(query)
            documents = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(
                message="Error fetching PDFs",
                context={"operation": operation, "error_type": type(e).__name__},
            )
        return [to_response(document) for document in documents]

    async def list_approved(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        sort: DocumentSort = DocumentSort.CREATED_AT_DESC,
    ) -> List[DocumentResponse]:
        """
        Public listing: approved documents only, newest first by default.

        Search matches title, author or the byte size, case-insensitively.
        """
        query = self._build_list_query(search, sort, approved=True)
        return await self._fetch_list(db, query, "list_approved")

    async def list_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        sort: DocumentSort = DocumentSort.CREATED_AT_DESC,
        status: Optional[ApprovalStatus] = None,
    ) -> List[DocumentResponse]:
        """Admin listing: every document, optionally narrowed to pending or approved."""
        approved = None
        if status is ApprovalStatus.PENDING:
            approved = False
        elif status is ApprovalStatus.APPROVED:
            approved = True
        query = self._build_list_query(search, sort, approved=approved)
        return await self._fetch_list(db, query, "list_all")

    async def _load(self, db: AsyncSession, document_id: UUID) -> NoteDocument:
        try:
            result = await db.execute(select(NoteDocument).where(NoteDocument.id == document_id))
            document = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching PDF %s: %s", document_id, str(e))
            raise DatabaseError(context={"document_id": str(document_id)})

        if document is None:
            raise NotFoundError(resource=RESOURCE, resource_id=str(document_id))
        return document

    async def get_document(self, db: AsyncSession, document_id: UUID) -> DocumentResponse:
        """Fetch one document regardless of approval state."""
        return to_response(await self._load(db, document_id))

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload_document(
        self,
        db: AsyncSession,
        title: Optional[str],
        author: Optional[str],
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> DocumentResponse:
        """
        Store an uploaded PDF and create its pending document record.

        Workflow:
            1. Validate title/author
            2. Validate and store the file (FileService)
            3. Insert the row (unapproved, zero counters)
            4. Commit; on insert or commit failure remove the stored file and
               raise DatabaseError

        Raises:
            ValidationError: missing title/author, bad file type, bad size
            FileStorageError: disk write failed
            DatabaseError: insert failed
        """
        clean_title = _clean_text(title, "title")
        clean_author = _clean_text(author, "author")

        absolute_path, locator = await file_service.validate_and_store(
            filename=filename,
            content=content,
            content_length=content_length,
        )

        now = utcnow()
        document = NoteDocument(
            title=clean_title,
            author=clean_author,
            file_ref=locator,
            file_size=len(content),
            is_approved=False,
            views=0,
            downloads=0,
            created_at=now,
            updated_at=now,
        )

        try:
            db.add(document)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            await file_service.cleanup_file(absolute_path)
            logger.error("Error saving uploaded PDF: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error uploading PDF",
                context={"error_type": type(e).__name__},
            )

        logger.info("PDF %s uploaded: '%s' by %s (%d bytes)", document.id, clean_title, clean_author, len(content))
        return to_response(document)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def _commit(self, db: AsyncSession, document_id: Optional[UUID], operation: str) -> None:
        """
        End the transaction before the handler returns, so the caller only
        sees success for writes that are durable.
        """
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error during %s of PDF %s: %s", operation, document_id, str(e))
            raise DatabaseError(context={"operation": operation, "document_id": str(document_id)})

    async def approve_document(self, db: AsyncSession, document_id: UUID) -> DocumentResponse:
        """
        Mark a document approved. Calling it again on an approved document
        succeeds and only refreshes updated_at.
        """
        document = await self._load(db, document_id)
        already_approved = document.is_approved
        document.is_approved = True
        document.updated_at = next_timestamp(document.updated_at)
        await self._commit(db, document_id, "approve")

        if already_approved:
            logger.info("PDF %s was already approved", document_id)
        else:
            logger.info("PDF %s approved", document_id)
        return to_response(document)

    async def update_document(
        self,
        db: AsyncSession,
        document_id: UUID,
        changes: DocumentUpdate,
    ) -> DocumentResponse:
        """
        Overwrite the supplied descriptive fields.

        id, file_ref, file_size, created_at, counters and approval state are
        never touched. updated_at always moves forward, even for an empty body.
        """
        document = await self._load(db, document_id)
        fields: Dict[str, str] = changes.model_dump(exclude_unset=True, exclude_none=True)

        for name, value in fields.items():
            setattr(document, name, value)
        document.updated_at = next_timestamp(document.updated_at)
        await self._commit(db, document_id, "update")

        logger.info("PDF %s updated: %s", document_id, sorted(fields) or "no fields")
        return to_response(document)

    async def delete_document(self, db: AsyncSession, document_id: UUID) -> str:
        """
        Remove a document row.

        Returns:
            The file locator. The delete is committed by then, so the caller
            can schedule removal of the stored PDF.
        """
        document = await self._load(db, document_id)
        file_ref = document.file_ref
        try:
            await db.delete(document)
        except SQLAlchemyError as e:
            logger.error("Database error deleting PDF %s: %s", document_id, str(e))
            raise DatabaseError(message="Error deleting PDF", context={"document_id": str(document_id)})
        await self._commit(db, document_id, "delete")

        logger.info("PDF %s deleted", document_id)
        return file_ref

    # ── Counters ──────────────────────────────────────────────────────────

    async def _increment(self, db: AsyncSession, document_id: UUID, counter: str) -> int:
        column = getattr(NoteDocument, counter)
        stmt = (
            update(NoteDocument)
            .where(NoteDocument.id == document_id)
            .values({column: column + 1, NoteDocument.updated_at: utcnow()})
            .returning(column)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            value = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error tracking %s for PDF %s: %s", counter, document_id, str(e))
            raise DatabaseError(
                message=f"Error tracking {counter}",
                context={"document_id": str(document_id)},
            )

        if value is None:
            raise NotFoundError(resource=RESOURCE, resource_id=str(document_id))
        await self._commit(db, document_id, f"track_{counter}")
        logger.debug("PDF %s %s=%d", document_id, counter, value)
        return value

    async def track_view(self, db: AsyncSession, document_id: UUID) -> int:
        """Increment the view counter by exactly one and return the new value."""
        return await self._increment(db, document_id, "views")

    async def track_download(self, db: AsyncSession, document_id: UUID) -> int:
        """Increment the download counter by exactly one and return the new value."""
        return await self._increment(db, document_id, "downloads")


document_service = DocumentService()
