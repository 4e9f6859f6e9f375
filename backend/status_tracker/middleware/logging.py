"""
Status Tracker Backend: Request Logging Middleware
===================================================

What:  One access log line per HTTP request with status and duration.
How:   Times the downstream call and logs at a level chosen by status class.

Log line:
    GET /api/status 200 3.4ms [a1b2c3d4] from 127.0.0.1

    Structured fields (request_id, method, path, status, duration_ms,
    client_ip) are attached via `extra` for JSON formatters.

Never logged: request bodies (passwords) and the Authorization header.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from status_tracker.middleware.request_id import request_id_var

logger = logging.getLogger("status_tracker.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status and duration of each request.

    Levels:
        5xx → ERROR
        4xx → WARNING
        else → INFO

    /health is skipped; Docker probes it every few seconds.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get()
        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
