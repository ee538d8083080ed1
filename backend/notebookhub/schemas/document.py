"""
NotebookHub Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the API contract between frontend and backend.
Why:   Strict input validation, automatic serialization, and OpenAPI docs.
How:   FastAPI validates request bodies against these models and serializes
       responses through them.

Wire format:
    Python attributes are snake_case; JSON is camelCase (`fileUrl`,
    `isApproved`, `createdAt`) because that is what the web client reads.
    `populate_by_name` lets request bodies use either spelling.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


# ══════════════════════════════════════════════════════════════════════════
# Query Parameter Enums
# ══════════════════════════════════════════════════════════════════════════


class DocumentSort(str, Enum):
    """Sort orders offered by the listing endpoints."""

    CREATED_AT_DESC = "created_at_desc"
    CREATED_AT_ASC = "created_at_asc"
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"
    FILE_SIZE_ASC = "file_size_asc"
    FILE_SIZE_DESC = "file_size_desc"


class ApprovalStatus(str, Enum):
    """Moderation filter for the admin listing."""

    PENDING = "pending"
    APPROVED = "approved"


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class DocumentResponse(BaseModel):
    """
    What:  Full representation of a shared PDF.
    Who:   Returned by every endpoint that yields a document (list, upload,
           approve, edit, get).
    """

    id: uuid.UUID = Field(description="Unique document identifier (UUID)")
    title: str = Field(description="Title given by the uploader")
    author: str = Field(description="Author given by the uploader")
    file_url: str = Field(description="Path under /uploads serving the PDF")
    file_size: int = Field(ge=0, description="Size of the PDF in bytes")
    is_approved: bool = Field(description="Whether an admin approved the document")
    views: int = Field(ge=0, description="Number of recorded views")
    downloads: int = Field(ge=0, description="Number of recorded downloads")
    created_at: datetime = Field(description="Upload time (UTC)")
    updated_at: datetime = Field(description="Last modification time (UTC)")

    model_config = CAMEL_CONFIG


class ViewCountResponse(BaseModel):
    """Returned by POST /api/pdfs/{id}/view."""

    views: int = Field(ge=0)


class DownloadCountResponse(BaseModel):
    """Returned by POST /api/pdfs/{id}/download."""

    downloads: int = Field(ge=0)


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    """Signed admin token; valid for ACCESS_TOKEN_EXPIRE_MINUTES."""

    token: str


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


def _require_text(value: Optional[str], field_name: str) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must not be empty")
    return stripped


class DocumentUpdate(BaseModel):
    """
    Partial update body for PATCH/PUT /api/pdfs/{id}.

    Only descriptive fields are editable. Identity, file locator, size,
    counters and approval state are rejected (`extra="forbid"`) so the
    document invariants cannot be bypassed through an edit.
    """

    title: Optional[str] = Field(default=None, max_length=255)
    author: Optional[str] = Field(default=None, max_length=255)

    model_config = {**CAMEL_CONFIG, "extra": "forbid"}

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v, "title")

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: Optional[str]) -> Optional[str]:
        return _require_text(v, "author")


class LoginRequest(BaseModel):
    username: str
    password: str


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "PDF with ID '...' was not found",
            "request_id": "1a2b3c4d"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
