"""
Status Tracker Backend: Auth Dependencies
==========================================

What:  FastAPI dependencies that authenticate the bearer token and enforce
       the admin role per route.
How:   HTTPBearer(auto_error=False) extracts the token; we raise our own
       AuthenticationError/PermissionDeniedError so failures use the
       standard error envelope instead of FastAPI's default 403 body.

Usage:
    @router.get("/me")
    async def me(current_user: TokenPayload = Depends(get_current_user)): ...

    @router.post("/", dependencies=[Depends(require_admin)])
    async def create(...): ...

Outcomes:
    no / non-bearer Authorization header  → 401 "Access token required"
    bad signature, garbage, expired       → 401 "Invalid token"
    valid token, role != admin            → 403 "Admin access required"
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from status_tracker.exceptions import AuthenticationError, PermissionDeniedError
from status_tracker.security import InvalidTokenError, TokenPayload, decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by POST /api/auth/login")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenPayload:
    """Decode the bearer token into the caller's identity."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")

    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.info("Rejected bearer token: %s", e)
        raise AuthenticationError("Invalid token")


async def require_admin(
    current_user: TokenPayload = Depends(get_current_user),
) -> TokenPayload:
    """Pass admins through; reject every other role with 403."""
    if not current_user.is_admin:
        logger.warning(
            "User %s (%s) denied admin-only access", current_user.username, current_user.role
        )
        raise PermissionDeniedError("Admin access required")
    return current_user
