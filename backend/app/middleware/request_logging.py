"""
Exam Builder Backend — Request Context & Access Logging Middleware
====================================================================

What:  Assigns a request id to every request and writes one access log
       line per response.
How:   The id comes from the client's X-Request-ID header when present,
       otherwise from a short uuid4 prefix. It is stored in a ContextVar so
       exception handlers can include it in their log lines, and echoed
       back in the X-Request-ID response header.

Log line:
    GET /users/7 404 3.2ms [a1b2c3d4] from 127.0.0.1

    5xx → ERROR, 4xx → WARNING, everything else → INFO.
    /health is not logged; orchestrators poll it every few seconds.
    Request bodies are never logged (they carry passwords).
"""

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("exambuilder.access")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

_UNLOGGED_PATHS = frozenset({"/health"})


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request id propagation plus structured access logging."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid

        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid

        path = request.url.path
        if path in _UNLOGGED_PATHS:
            return response

        duration_ms = (time.perf_counter() - start) * 1000
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            _level_for(response.status_code),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            response.status_code,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
