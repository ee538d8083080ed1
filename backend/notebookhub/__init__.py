"""
NotebookHub Backend — Application Package Initializer
======================================================

What: Marks the `notebookhub` directory as a Python package.
Why:  Enables module imports like `from notebookhub.config import settings`.
Who:  Used by uvicorn (`uvicorn notebookhub.main:app`), Alembic and pytest.

Architecture Note:
    The backend is a thin REST layer over a document table:

    ┌─────────────────────────────────────┐
    │     Routes + Auth Guard (HTTP)      │  ← status codes, bearer tokens
    ├─────────────────────────────────────┤
    │    Services (DocumentService,       │  ← approval, counters, search
    │    FileService, AuthService)        │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never hold document state between requests; the database is the
    only shared mutable resource.
"""

__version__ = "1.0.0"
