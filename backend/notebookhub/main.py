"""
NotebookHub Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers.
Who:   uvicorn notebookhub.main:app

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │    /api/pdfs...   /api/login   /uploads/...  /health│
    │                                                     │
    │  Exception Handlers:                                │
    │    Validation→400  Unauthorized→401  Forbidden→403  │
    │    NotFound→404    Storage/DB/unexpected→500        │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration warnings, storage directory
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from notebookhub import __version__
from notebookhub.config import settings
from notebookhub.database import dispose_engine
from notebookhub.exceptions import (
    DatabaseError,
    FileStorageError,
    ForbiddenError,
    NotebookHubError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from notebookhub.middleware.logging import RequestLoggingMiddleware
from notebookhub.middleware.request_id import RequestIDMiddleware, request_id_var
from notebookhub.routes import auth, files, health, pdfs

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure application-wide logging to stdout.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Warn about insecure configuration
        3. Create the storage directory
    Shutdown:
        1. Dispose database engine (close pooled connections)
    """
    setup_logging()
    logger.info("NotebookHub Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: development setups run on the defaults
        logger.warning("%s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    logger.info(
        "Edit/delete require admin token: %s",
        "yes" if settings.require_auth_for_mutations else "NO",
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("NotebookHub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the shared error body.

    Handler table:
        ValidationError, RequestValidationError → 400
        UnauthorizedError                       → 401 (+ WWW-Authenticate)
        ForbiddenError                          → 403
        NotFoundError                           → 404
        FileStorageError, DatabaseError         → 500 (generic message)
        NotebookHubError, Exception             → 500

    Validation context (field, limits) goes back as `details`. For 5xx the
    context, stack trace and SQL are logged only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed JSON, form or query input: same 400 shape as service validation."""
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", message, {"errors": errors}),
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning("[%s] Rejected token: %s", request_id_var.get(""), exc.context.get("reason"))
        return JSONResponse(status_code=403, content=_error_body("forbidden", exc.message))

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=_error_body("not_found", exc.message))

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(NotebookHubError)
    async def handle_app_error(request: Request, exc: NotebookHubError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body("server_error", exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, handlers and routers into a FastAPI app."""
    app = FastAPI(
        title="NotebookHub API",
        description=(
            "Share handwritten-notes PDFs. Uploads are reviewed by an admin "
            "before they appear in the public list."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(pdfs.router)
    app.include_router(auth.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


app = create_app()
