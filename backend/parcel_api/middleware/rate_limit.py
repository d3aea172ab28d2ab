"""
Parcel Delivery Backend — Rate Limiting Middleware
====================================================

What:  Per-IP sliding window rate limiter.
How:   Keeps each IP's request timestamps in memory. On every request the
       timestamps older than the window are dropped; if the remainder has
       reached the limit the request is answered with 429 and Retry-After.

Limits come from settings (RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW
seconds) and are read per request, so tests can change them at runtime.

State is per process. Running several uvicorn workers multiplies the
effective limit by the worker count.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from parcel_api.config import settings
from parcel_api.exceptions import RateLimitExceededError
from parcel_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

CLEANUP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """In-memory sliding window rate limiter."""

    # Liveness checks and API docs are never limited
    EXCLUDED_PATHS = {"/", "/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )
        limit = settings.rate_limit_requests
        window = settings.rate_limit_window

        now = time.time()
        window_start = now - window

        # ── Sliding Window: drop expired entries ──────────────────────────
        timestamps = [ts for ts in self._requests[client_ip] if ts > window_start]
        self._requests[client_ip] = timestamps

        if len(timestamps) >= limit:
            retry_after = int(timestamps[0] + window - now) + 1
            logger.warning(
                "[%s] Rate limit exceeded for IP %s: %d requests in %ds window",
                request_id_var.get(""),
                client_ip,
                len(timestamps),
                window,
            )
            # Runs outside the exception handlers, so the error is rendered here
            exc = RateLimitExceededError(retry_after=retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        timestamps.append(now)

        self._seen += 1
        if self._seen % CLEANUP_EVERY == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        """Forget IPs with no request inside the current window."""
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
