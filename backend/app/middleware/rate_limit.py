"""
Linkhub Backend: Rate Limiting Middleware
============================================

What:  Per-IP sliding window rate limiter.
How:   Keeps a deque of request timestamps per client IP in memory. Requests
       over the limit get the RateLimitExceededError envelope (429 with a
       Retry-After header) without reaching any route.
When:  First in the middleware chain.

Algorithm: Sliding Window Log
    1. Drop timestamps older than `window` seconds from the client's deque
    2. If `max_requests` remain, reject; retry when the oldest one expires
    3. Otherwise record now and pass the request on

Scope:
    State lives in the process. Each uvicorn worker limits independently.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

# Idle clients are swept after this many recorded requests
CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Limits default to `settings.rate_limit_requests` per
    `settings.rate_limit_window` seconds; tests pass smaller values.
    Health checks and API docs are never limited.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window = window or settings.rate_limit_window
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._recorded = 0

    def check(self, client: str, now: float) -> None:
        """
        Record a request from `client` at `now`.

        Raises:
            RateLimitExceededError: client is over the limit (→ 429)
        """
        timestamps = self._requests[client]
        window_start = now - self.window
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window - now) + 1
            raise RateLimitExceededError(retry_after=retry_after, context={"client": client})

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % CLEANUP_EVERY == 0:
            self._cleanup_inactive(window_start)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        try:
            self.check(client_ip, time.time())
        except RateLimitExceededError as exc:
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                self.max_requests,
                self.window,
            )
            # Raised outside the app's exception handlers, so render it here
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": {"retry_after": exc.retry_after},
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)

    def _cleanup_inactive(self, window_start: float) -> None:
        inactive = [
            client for client, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for client in inactive:
            del self._requests[client]

        if inactive:
            logger.debug("Cleaned up %d inactive client entries", len(inactive))
