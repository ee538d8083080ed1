"""
NotebookHub Backend — Access Log Middleware
============================================

One line per request on the `notebookhub.access` logger:

    PATCH /api/pdfs/5f0c.../approve 200 12.4ms [1a2b3c4d] 412B from 10.0.0.7

The same values are attached as `extra` fields (request_id, method, path,
status, duration_ms, response_bytes, client_ip, user_agent) for log
shippers that index record attributes.

Not logged: request bodies (uploaded PDFs, login passwords) and the
Authorization header.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notebookhub.middleware.request_id import request_id_var

logger = logging.getLogger("notebookhub.access")

# Load balancer probes hit these every few seconds
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with duration; requests that raise are logged as 500."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
            return response
        finally:
            self._log(request, response, (time.perf_counter() - started) * 1000)

    def _log(self, request: Request, response: Optional[Response], duration_ms: float) -> None:
        status = response.status_code if response is not None else 500
        size = response.headers.get("content-length", "-") if response is not None else "-"
        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] %sB from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            size,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "response_bytes": size,
                "client_ip": client_ip,
                "user_agent": request.headers.get("user-agent", ""),
            },
        )
