"""
NotebookHub Backend — Stored PDF Serving
=========================================

What:  GET /uploads/{path} returns the stored PDF behind a document's fileUrl.
Why:   Document records carry locators like /uploads/2024/01/15/<uuid>.pdf;
       this route is the other half of that contract.

Security:
    - FileService.resolve_locator refuses paths that escape STORAGE_ROOT
    - Only regular files are served; anything else is 404
"""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from notebookhub.schemas.document import ErrorResponse
from notebookhub.services.file_service import UPLOADS_PREFIX, file_service

router = APIRouter(prefix=UPLOADS_PREFIX, tags=["Files"])


@router.get(
    "/{file_path:path}",
    summary="Serve an uploaded PDF",
    responses={
        200: {"description": "PDF file", "content": {"application/pdf": {}}},
        400: {"description": "Invalid path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    full_path = file_service.open_stored_file(file_path)
    return FileResponse(
        path=str(full_path),
        media_type="application/pdf",
        filename=full_path.name,
        content_disposition_type="inline",
        headers={"Cache-Control": "public, max-age=86400"},
    )
