"""
Status Tracker Backend: Rate Limiting Middleware
=================================================

What:  Per-IP sliding window rate limiter with two budgets.
How:   Tracks request timestamps per (budget, IP) in memory.
When:  Outermost application middleware, so abuse is rejected before any
       other processing.

Budgets:
    general:  every path except the excluded ones
              (RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW seconds)
    auth:     POST-able credential endpoints, login and register
              (AUTH_RATE_LIMIT_REQUESTS per AUTH_RATE_LIMIT_WINDOW seconds)

    An auth request is counted against both budgets.

Algorithm: Sliding Window
    1. Drop timestamps older than the window
    2. If the remaining count >= limit, reject with 429
    3. Otherwise record the current timestamp and let the request through

Limitations:
    State lives in process memory, so limits are per worker process.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from status_tracker.config import settings
from status_tracker.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)

AUTH_PATHS = frozenset({"/api/auth/login", "/api/auth/register"})


class SlidingWindow:
    """Timestamps per key within a fixed-length trailing window."""

    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window_seconds = window_seconds
        self._hits: Dict[str, List[float]] = defaultdict(list)

    def hit(self, key: str, now: float) -> Optional[int]:
        """
        Record a request for `key`.

        Returns:
            None when the request is allowed, otherwise the number of seconds
            until the oldest recorded request leaves the window.
        """
        window_start = now - self.window_seconds
        hits = [ts for ts in self._hits[key] if ts > window_start]
        self._hits[key] = hits

        if len(hits) >= self.limit:
            return int(hits[0] + self.window_seconds - now) + 1

        hits.append(now)
        return None

    def cleanup(self, now: float) -> int:
        """Forget keys with no request inside the window; returns how many."""
        window_start = now - self.window_seconds
        inactive = [
            key for key, hits in self._hits.items()
            if not hits or hits[-1] <= window_start
        ]
        for key in inactive:
            del self._hits[key]
        return len(inactive)

    def __len__(self) -> int:
        return sum(len(hits) for hits in self._hits.values())


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Constructor arguments default to the RATE_LIMIT_* / AUTH_RATE_LIMIT_*
    settings; tests pass small budgets directly.

    Excluded paths:
        /health, /docs, /openapi.json, /redoc

    Response on rate limit:
        HTTP 429 with Retry-After and the standard error envelope plus
        `retryAfter`:
        {"success": false, "error": "...", "code": "RATE_LIMIT_EXCEEDED", "retryAfter": 42}
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Cleanup of idle IPs runs every N recorded requests
    CLEANUP_EVERY = 1000

    def __init__(
        self,
        app,
        enabled: Optional[bool] = None,
        requests: Optional[int] = None,
        window: Optional[int] = None,
        auth_requests: Optional[int] = None,
        auth_window: Optional[int] = None,
    ):
        super().__init__(app)
        self.enabled = settings.rate_limit_enabled if enabled is None else enabled
        self.general = SlidingWindow(
            requests or settings.rate_limit_requests,
            window or settings.rate_limit_window,
        )
        self.auth = SlidingWindow(
            auth_requests or settings.auth_rate_limit_requests,
            auth_window or settings.auth_rate_limit_window,
        )
        self._seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if not self.enabled or path in self.EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        # Behind a proxy this is the proxy's address unless uvicorn is run
        # with --proxy-headers
        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        rejection = self._check(path, client_ip, now)
        if rejection is not None:
            return self._reject(rejection, client_ip, path)

        self._seen += 1
        if self._seen % self.CLEANUP_EVERY == 0:
            removed = self.general.cleanup(now) + self.auth.cleanup(now)
            if removed:
                logger.debug("Cleaned up %d inactive rate limit entries", removed)

        return await call_next(request)

    def _check(self, path: str, client_ip: str, now: float) -> Optional[RateLimitExceededError]:
        budgets: List[Tuple[SlidingWindow, str, str]] = []
        if path in AUTH_PATHS:
            budgets.append((
                self.auth,
                "AUTH_RATE_LIMIT_EXCEEDED",
                "Too many authentication attempts, please try again later",
            ))
        budgets.append((
            self.general,
            "RATE_LIMIT_EXCEEDED",
            "Too many requests, please try again later",
        ))

        for window, code, message in budgets:
            retry_after = window.hit(client_ip, now)
            if retry_after is not None:
                return RateLimitExceededError(
                    retry_after=retry_after, message=message, code=code
                )
        return None

    def _reject(self, error: RateLimitExceededError, client_ip: str, path: str) -> JSONResponse:
        logger.warning(
            "Rate limit exceeded (%s) for IP %s on %s", error.code, client_ip, path
        )
        return JSONResponse(
            status_code=error.status_code,
            content={
                "success": False,
                "error": error.message,
                "code": error.code,
                "retryAfter": error.retry_after,
            },
            headers={"Retry-After": str(error.retry_after)},
        )
