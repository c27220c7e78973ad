"""
Ulyngo Backend — Rate Limiting Middleware
===========================================

What:  Per-client sliding-window limiter for the endpoints that spend
       Google Maps / Vertex AI quota.
How:   Keeps a deque of request timestamps per client IP. Timestamps older
       than the window are dropped on each request; a client already at the
       limit gets 429 with Retry-After.
       Every other path (auth, markers, health, docs) is not limited.

In-memory state, so the limit is per process. Multiple workers each keep
their own window.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Args:
        max_requests:   Requests allowed per client inside one window
        window_seconds: Window length
    """

    LIMITED_PREFIXES = ("/api/plan-trip", "/api/routes", "/api/places")

    # Drop idle clients every this many recorded requests
    CLEANUP_EVERY = 1000

    def __init__(self, app, max_requests: int, window_seconds: int):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)
        self._recorded = 0

    def _is_limited(self, request: Request) -> bool:
        return request.method != "OPTIONS" and request.url.path.startswith(self.LIMITED_PREFIXES)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._is_limited(request):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        window_start = now - self.window_seconds

        timestamps = self._requests[client_ip]
        while timestamps and timestamps[0] <= window_start:
            timestamps.popleft()

        if len(timestamps) >= self.max_requests:
            retry_after = int(timestamps[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for %s on %s: %d requests in %ds window",
                client_ip,
                request.url.path,
                len(timestamps),
                self.window_seconds,
            )
            # Middleware runs outside the exception handlers, so build the body here
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": exc.message,
                    "code": exc.code,
                    "details": None,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_idle_clients(window_start)

        return await call_next(request)

    def _cleanup_idle_clients(self, window_start: float) -> None:
        idle = [ip for ip, ts in self._requests.items() if not ts or ts[-1] <= window_start]
        for ip in idle:
            del self._requests[ip]
        if idle:
            logger.debug("Dropped rate-limit state for %d idle clients", len(idle))
