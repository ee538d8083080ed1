"""
NotebookHub Backend — PDF Route Handlers
=========================================

What:  The /api/pdfs resource: listing, upload, moderation, edits, deletion
       and view/download tracking.
How:   Extracts request data, applies the auth guard, delegates to
       DocumentService, returns JSON.

Route Map:
    GET    /api/pdfs                  public, approved only
    GET    /api/pdfs/admin            admin, all documents
    POST   /api/pdfs/upload           public, multipart (file, title, author)
    GET    /api/pdfs/{id}             public for approved, admin for pending
    PATCH  /api/pdfs/{id}/approve     admin
    PATCH  /api/pdfs/{id}             admin (see REQUIRE_AUTH_FOR_MUTATIONS)
    PUT    /api/pdfs/{id}             same as PATCH
    DELETE /api/pdfs/{id}             admin (see REQUIRE_AUTH_FOR_MUTATIONS)
    POST   /api/pdfs/{id}/view        public counter
    POST   /api/pdfs/{id}/download    public counter

Ids are opaque to clients: a value that is not a UUID is reported as 404,
exactly like an unknown id.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from notebookhub.database import get_db_session
from notebookhub.dependencies import (
    get_current_admin,
    get_optional_admin,
    require_admin_for_mutations,
)
from notebookhub.exceptions import NotFoundError, ValidationError
from notebookhub.schemas.document import (
    ApprovalStatus,
    DocumentResponse,
    DocumentSort,
    DocumentUpdate,
    DownloadCountResponse,
    ErrorResponse,
    MessageResponse,
    ViewCountResponse,
)
from notebookhub.services.auth_service import AdminPrincipal
from notebookhub.services.document_service import RESOURCE, document_service
from notebookhub.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pdfs", tags=["PDFs"])

ADMIN_ERRORS = {
    401: {"description": "Missing bearer token", "model": ErrorResponse},
    403: {"description": "Invalid or expired token", "model": ErrorResponse},
}
NOT_FOUND = {404: {"description": "PDF not found", "model": ErrorResponse}}


def parse_document_id(document_id: str) -> UUID:
    try:
        return UUID(document_id)
    except ValueError:
        raise NotFoundError(resource=RESOURCE, resource_id=document_id)


# ── Listings ──────────────────────────────────────────────────────────────


@router.get(
    "",
    response_model=List[DocumentResponse],
    summary="List approved PDFs",
)
async def list_approved_pdfs(
    search: Optional[str] = Query(
        default=None,
        max_length=200,
        description="Case-insensitive match on title, author or size in bytes",
    ),
    sort: DocumentSort = Query(default=DocumentSort.CREATED_AT_DESC),
    db: AsyncSession = Depends(get_db_session),
) -> List[DocumentResponse]:
    """Public catalogue. Unapproved uploads never appear here."""
    return await document_service.list_approved(db, search=search, sort=sort)


@router.get(
    "/admin",
    response_model=List[DocumentResponse],
    responses=ADMIN_ERRORS,
    summary="List all PDFs (admin)",
)
async def list_all_pdfs(
    search: Optional[str] = Query(default=None, max_length=200),
    sort: DocumentSort = Query(default=DocumentSort.CREATED_AT_DESC),
    status: Optional[ApprovalStatus] = Query(
        default=None,
        description="Only pending or only approved documents",
    ),
    admin: AdminPrincipal = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> List[DocumentResponse]:
    """Moderation queue and catalogue in one list."""
    return await document_service.list_all(db, search=search, sort=sort, status=status)


# ── Upload ────────────────────────────────────────────────────────────────


@router.post(
    "/upload",
    status_code=201,
    response_model=DocumentResponse,
    responses={400: {"description": "Missing file, not a PDF, or too large", "model": ErrorResponse}},
    summary="Upload a PDF for review",
)
async def upload_pdf(
    file: Optional[UploadFile] = File(default=None, description="PDF file (max 10MB)"),
    title: Optional[str] = Form(default=None),
    author: Optional[str] = Form(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> DocumentResponse:
    """
    Accept a multipart upload. The new document is hidden from the public
    list until an admin approves it.

    The body is read through FileService.read_upload, which stops as soon as
    the configured size limit is passed.
    """
    if file is None or not file.filename:
        raise ValidationError(message="No file uploaded", field="file")

    try:
        content = await file_service.read_upload(file)
        logger.info(
            "Received upload: filename=%s, size=%d bytes",
            file.filename,
            len(content),
        )
        return await document_service.upload_document(
            db=db,
            title=title,
            author=author,
            filename=file.filename,
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()


# ── Single document ───────────────────────────────────────────────────────


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    responses={**NOT_FOUND, 403: ADMIN_ERRORS[403]},
    summary="Get one PDF",
)
async def get_pdf(
    document_id: str,
    admin: Optional[AdminPrincipal] = Depends(get_optional_admin),
    db: AsyncSession = Depends(get_db_session),
) -> DocumentResponse:
    """Pending documents are reported as missing to anonymous callers."""
    doc_id = parse_document_id(document_id)
    document = await document_service.get_document(db, doc_id)
    if not document.is_approved and admin is None:
        raise NotFoundError(resource=RESOURCE, resource_id=document_id)
    return document


@router.patch(
    "/{document_id}/approve",
    response_model=DocumentResponse,
    responses={**ADMIN_ERRORS, **NOT_FOUND},
    summary="Approve a PDF (admin)",
)
async def approve_pdf(
    document_id: str,
    admin: AdminPrincipal = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> DocumentResponse:
    logger.info("Admin %s approving PDF %s", admin.username, document_id)
    return await document_service.approve_document(db, parse_document_id(document_id))


@router.api_route(
    "/{document_id}",
    methods=["PATCH", "PUT"],
    response_model=DocumentResponse,
    responses={**ADMIN_ERRORS, **NOT_FOUND},
    summary="Edit title and/or author",
)
async def update_pdf(
    document_id: str,
    changes: DocumentUpdate,
    admin: Optional[AdminPrincipal] = Depends(require_admin_for_mutations),
    db: AsyncSession = Depends(get_db_session),
) -> DocumentResponse:
    """Partial update; fields other than title and author are rejected with 400."""
    return await document_service.update_document(db, parse_document_id(document_id), changes)


@router.delete(
    "/{document_id}",
    response_model=MessageResponse,
    responses={**ADMIN_ERRORS, **NOT_FOUND},
    summary="Delete a PDF",
)
async def delete_pdf(
    document_id: str,
    background_tasks: BackgroundTasks,
    admin: Optional[AdminPrincipal] = Depends(require_admin_for_mutations),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    """
    Remove the document. The row delete is committed by the service, then
    the stored PDF is removed in the background after the response.
    """
    file_ref = await document_service.delete_document(db, parse_document_id(document_id))
    background_tasks.add_task(file_service.remove_by_locator, file_ref)
    return MessageResponse(message="PDF deleted successfully")


# ── Counters ──────────────────────────────────────────────────────────────


@router.post(
    "/{document_id}/view",
    response_model=ViewCountResponse,
    responses=NOT_FOUND,
    summary="Record a view",
)
async def track_view(
    document_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> ViewCountResponse:
    """Every call counts; there is no per-client deduplication."""
    views = await document_service.track_view(db, parse_document_id(document_id))
    return ViewCountResponse(views=views)


@router.post(
    "/{document_id}/download",
    response_model=DownloadCountResponse,
    responses=NOT_FOUND,
    summary="Record a download",
)
async def track_download(
    document_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DownloadCountResponse:
    downloads = await document_service.track_download(db, parse_document_id(document_id))
    return DownloadCountResponse(downloads=downloads)
