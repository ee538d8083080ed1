"""
NotebookHub Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any notebookhub import, so the
       settings singleton, the engine and the service singletons all point
       at a throwaway SQLite database and storage directory.

Fixture Hierarchy:
    Function-scoped:
    ├── database_tables: fresh pdf_documents table on the SQLite test DB
    ├── db_session:      AsyncSession for service-level tests
    ├── mock_db_session: AsyncMock session for failure paths
    ├── test_client:     HTTPX AsyncClient bound to the FastAPI app
    ├── admin_token:     token issued by POST /api/login
    ├── admin_headers:   Authorization header built from admin_token
    ├── temp_storage:    empty directory for FileService unit tests
    ├── sample_pdf_bytes
    └── upload_pdf:      helper that uploads (and optionally approves) a PDF
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

_TEST_ROOT = tempfile.mkdtemp(prefix="notebookhub_test_")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ["REQUIRE_AUTH_FOR_MUTATIONS"] = "true"
# libmagic is not guaranteed on CI hosts; signature checks have their own unit tests
os.environ["VERIFY_FILE_SIGNATURE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from notebookhub import database  # noqa: E402
from notebookhub.models.document import NoteDocument  # noqa: E402,F401

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "test-password"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database_tables():
    """
    Recreate the schema for every test and release pooled connections
    afterwards (each test runs on its own event loop).
    """
    async with database.engine.begin() as conn:
        await conn.run_sync(database.Base.metadata.drop_all)
        await conn.run_sync(database.Base.metadata.create_all)
    yield
    await database.engine.dispose()


@pytest.fixture
def mock_db_session():
    """
    AsyncSession stand-in for failure paths a real SQLite session cannot
    easily produce (e.g. a flush that raises).
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def db_session(database_tables):
    """AsyncSession on the test database; rolled back when the test ends."""
    async with database.async_session_factory() as session:
        yield session
        await session.rollback()


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(database_tables):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from notebookhub.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def admin_token(test_client):
    response = await test_client.post(
        "/api/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


# ══════════════════════════════════════════════════════════════════════════
# Files
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    """Fresh storage directory for FileService unit tests."""
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


def make_pdf_bytes(size: int = 5000) -> bytes:
    """A PDF-looking payload of exactly `size` bytes."""
    header = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n"
    trailer = b"\n%%EOF\n"
    padding = max(size - len(header) - len(trailer), 0)
    return (header + b"0" * padding + trailer)[:size]


@pytest.fixture
def sample_pdf_bytes():
    return make_pdf_bytes(5000)


@pytest.fixture
def upload_pdf(test_client, admin_headers):
    """
    Upload a PDF through the API and return the response JSON.

    Usage:
        doc = await upload_pdf("Calculus Notes", "Ana", approve=True)
    """

    async def _upload(title="Calculus Notes", author="Ana", content=None, approve=False, filename="notes.pdf"):
        payload = content if content is not None else make_pdf_bytes(5000)
        response = await test_client.post(
            "/api/pdfs/upload",
            files={"file": (filename, payload, "application/pdf")},
            data={"title": title, "author": author},
        )
        assert response.status_code == 201, response.text
        document = response.json()
        if approve:
            approved = await test_client.patch(
                f"/api/pdfs/{document['id']}/approve",
                headers=admin_headers,
            )
            assert approved.status_code == 200, approved.text
            document = approved.json()
        return document

    return _upload
