"""
NotebookHub Backend — NoteDocument SQLAlchemy Model
====================================================

What:  ORM model representing the `pdf_documents` table.
Why:   Maps uploaded handwritten-notes PDFs and their moderation/counter
       state to database rows.
Who:   Used by DocumentService for CRUD and counters, by Alembic for schema.

Table Design Rationale:
    - UUID primary key: opaque, non-enumerable identifiers
    - file_ref: public locator ("/uploads/YYYY/MM/DD/<uuid>.pdf"), immutable
    - file_size: byte count of the stored payload, immutable
    - is_approved: moderation flag; only ever flipped false → true
    - views / downloads: public counters, updated with atomic
      `SET views = views + 1` statements, never read-modify-write
    - created_at / updated_at: UTC with timezone

    CHECK constraints back the non-negative invariants at the store level.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from notebookhub.database import Base


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class NoteDocument(Base):
    """
    A shared handwritten-notes PDF.

    Lifecycle:
        1. Created by a public upload (is_approved=False, counters at zero)
        2. Optionally edited (title/author) by an admin
        3. Optionally approved by an admin (one-way)
        4. Counters incremented by public view/download calls
        5. Deleted by an admin (terminal)
    """

    __tablename__ = "pdf_documents"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Opaque document identifier",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)

    file_ref: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        comment="Public locator of the stored PDF under /uploads",
    )

    file_size: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Size of the stored PDF in bytes",
    )

    is_approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    downloads: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("file_size >= 0", name="ck_pdf_documents_file_size_non_negative"),
        CheckConstraint("views >= 0", name="ck_pdf_documents_views_non_negative"),
        CheckConstraint("downloads >= 0", name="ck_pdf_documents_downloads_non_negative"),
        Index("idx_pdf_documents_created_at", "created_at"),
        Index("idx_pdf_documents_is_approved", "is_approved"),
    )

    def __repr__(self) -> str:
        return (
            f"<NoteDocument(id={self.id}, title='{self.title}', "
            f"approved={self.is_approved})>"
        )
