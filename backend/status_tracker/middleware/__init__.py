"""
Status Tracker Backend: Middleware Package
===========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [Security Headers] → [CORS] → Route

    1. Rate Limit first: reject abuse before any processing
    2. Request ID: correlation id for every later log line
    3. Logging: status and duration of everything the rate limiter admits
    4. Security Headers: applied to every response, errors included
    5. CORS: FastAPI's CORSMiddleware, innermost so preflights are answered

    Responses travel the chain in reverse.
"""

from status_tracker.middleware.logging import RequestLoggingMiddleware
from status_tracker.middleware.rate_limit import RateLimitMiddleware
from status_tracker.middleware.request_id import RequestIDMiddleware, request_id_var
from status_tracker.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RequestIDMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "request_id_var",
]
