"""Create pdf_documents table

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates `pdf_documents`, one row per shared handwritten-notes PDF.
How:   UUID primary key, moderation flag, two counters and UTC timestamps.
       CHECK constraints keep file_size and the counters non-negative.

Rollback: downgrade() drops the table. Stored files under STORAGE_ROOT are
left on disk.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "pdf_documents",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False, comment="Opaque document identifier"),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column(
            "file_ref",
            sa.String(512),
            nullable=False,
            comment="Public locator of the stored PDF under /uploads",
        ),
        sa.Column("file_size", sa.BigInteger(), nullable=False, comment="Size of the stored PDF in bytes"),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("views", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("downloads", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint("file_size >= 0", name="ck_pdf_documents_file_size_non_negative"),
        sa.CheckConstraint("views >= 0", name="ck_pdf_documents_views_non_negative"),
        sa.CheckConstraint("downloads >= 0", name="ck_pdf_documents_downloads_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Public list and admin list both order by created_at and filter on is_approved
    op.create_index("idx_pdf_documents_created_at", "pdf_documents", ["created_at"])
    op.create_index("idx_pdf_documents_is_approved", "pdf_documents", ["is_approved"])


def downgrade() -> None:
    op.drop_index("idx_pdf_documents_is_approved", table_name="pdf_documents")
    op.drop_index("idx_pdf_documents_created_at", table_name="pdf_documents")
    op.drop_table("pdf_documents")
