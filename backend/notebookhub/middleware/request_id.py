"""
NotebookHub Backend — Request ID Middleware
============================================

What:  Assigns a correlation ID to each request and echoes it back.
Why:   Every log line and every error body for a request carries the same
       ID, so a user-reported error can be matched to server logs.
How:   Reuses the client's X-Request-ID when present, otherwise generates a
       short UUID; stores it in a ContextVar and in request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

MAX_REQUEST_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets `request_id_var` and the X-Request-ID response header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")[:MAX_REQUEST_ID_LENGTH] or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
