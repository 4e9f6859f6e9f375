"""
Status Tracker Backend: Password Hashing and Token Tests
=========================================================

What we test:
    ✅ bcrypt hash/verify round trip and malformed stored hashes
    ✅ Token claims
    ✅ Expired, forged, garbage and claim-less tokens are all rejected
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from status_tracker.config import settings
from status_tracker.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:

    def test_hash_is_not_plain_text(self):
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert hashed.startswith("$2")

    def test_verify(self):
        hashed = hash_password("secret123")
        assert verify_password("secret123", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False


class TestTokens:

    def test_round_trip(self):
        token = create_access_token(user_id=7, username="alice", role="admin")
        payload = decode_access_token(token)
        assert payload.user_id == 7
        assert payload.username == "alice"
        assert payload.role == "admin"
        assert payload.is_admin is True

    def test_claims(self):
        token = create_access_token(user_id=3, username="bob", role="viewer")
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        assert claims["userId"] == 3
        assert claims["username"] == "bob"
        assert claims["role"] == "viewer"
        assert claims["exp"] - claims["iat"] == settings.jwt_expires_hours * 3600

    def test_expired_token_is_invalid(self):
        token = create_access_token(
            user_id=1, username="alice", role="admin", expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_wrong_secret_is_invalid(self):
        token = jwt.encode(
            {
                "userId": 1,
                "username": "alice",
                "role": "admin",
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_garbage_is_invalid(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not.a.token")

    def test_missing_exp_is_invalid(self):
        token = jwt.encode(
            {"userId": 1, "username": "alice", "role": "admin"},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_missing_identity_claims_is_invalid(self):
        token = jwt.encode(
            {"sub": "1", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(InvalidTokenError):
            decode_access_token(token)
