"""
Linkhub Backend: Request ID Middleware
=========================================

What:  Assigns a correlation ID to each request and echoes it in the response.
How:   Stores the ID in a ContextVar so loggers, exception handlers and the
       notification emitter can tag their output without passing it around.
Who:   Applied to every request via Starlette middleware.

A client-supplied X-Request-ID is reused, so the frontend can tie a UI
action to the server log lines it caused.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    """Short random ID; 8 hex chars are plenty for log correlation."""
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
