"""
Status Tracker Backend: Password Hashing & Access Tokens
=========================================================

What:  bcrypt password hashing (passlib) and signed, expiring bearer
       tokens (PyJWT, HS256).
Who:   AuthService issues tokens and checks passwords; the auth dependency
       decodes tokens on every protected request.

Token Claims:
    {
        "userId": 1,
        "username": "alice",
        "role": "admin" | "viewer",
        "iat": <issued-at, epoch seconds>,
        "exp": <expiry, epoch seconds>
    }

    Tokens are stateless: logout is the client discarding the token, and a
    token stays valid until `exp` even if the user's account changes.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from status_tracker.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


class InvalidTokenError(Exception):
    """Token is malformed, has a bad signature, is expired, or lacks claims."""


@dataclass(frozen=True)
class TokenPayload:
    """Decoded identity carried by an access token."""

    user_id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ── Passwords ─────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    Compare a plain password against a stored bcrypt hash.

    A malformed stored hash counts as a mismatch, so callers can report one
    uniform "Invalid credentials" message.
    """
    try:
        return pwd_context.verify(plain_password, password_hash)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


# ── Tokens ────────────────────────────────────────────────────────────────

def create_access_token(
    user_id: int,
    username: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token for the given identity, valid for JWT_EXPIRES_HOURS by default."""
    now = datetime.now(timezone.utc)
    expires_at = now + (expires_delta or timedelta(hours=settings.jwt_expires_hours))
    claims = {
        "userId": user_id,
        "username": username,
        "role": role,
        "iat": now,
        "exp": expires_at,
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenPayload:
    """
    Verify signature and expiry and return the identity claims.

    Raises:
        InvalidTokenError: for every failure mode (expired, forged, garbage,
            missing claims). Callers never need to tell them apart.
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token expired") from e
    except jwt.PyJWTError as e:
        raise InvalidTokenError("Token invalid") from e

    try:
        return TokenPayload(
            user_id=int(claims["userId"]),
            username=str(claims["username"]),
            role=str(claims["role"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidTokenError("Token missing identity claims") from e
