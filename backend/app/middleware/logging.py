"""
Linkhub Backend: Request Logging Middleware
==============================================

What:  One access log line per HTTP request on the `linkhub.access` logger.
How:   Times the downstream call and logs method, path, status, duration,
       request ID and client IP. The level follows the status class.
When:  After RequestIDMiddleware, so the request ID is already set.

Example line:
    2026-01-15T12:00:00 [INFO] linkhub.access: POST /api/connections/…/follow 200 12.4ms [a1b2c3d4] from 10.0.0.7

Privacy:
    Bodies and headers are never logged; the identity header in particular
    stays out of the access log.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("linkhub.access")

# Probed every few seconds by the load balancer
QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, everything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            level_for_status(status),
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
