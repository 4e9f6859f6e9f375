"""
Status Tracker Backend: Auth Request/Response Schemas
======================================================

What:  Pydantic models for login, registration and user payloads.
How:   FastAPI validates request bodies against these before the handler
       runs; failures become one aggregated 400 VALIDATION_ERROR.

Validation rules:
    Login:     username 1-50 chars, password non-empty
    Register:  same as login; optional privacyPolicyAccepted (default false)
    Admin create-user:  username 3-50 chars of [a-zA-Z0-9_-], password >= 6 chars
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from status_tracker.schemas.common import CamelModel

USERNAME_PATTERN = r"^[a-zA-Z0-9_-]+$"

Role = Literal["admin", "viewer"]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(CamelModel):
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1)


class CreateUserRequest(CamelModel):
    """Body of POST /api/auth/admin/register; admins pick the role."""

    username: str = Field(min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    password: str = Field(min_length=6)
    role: Role = Field(default="viewer")


class RegisterRequest(LoginRequest):
    """
    Body of POST /api/auth/register; the role is always viewer.

    Credentials follow the login rules. privacyPolicyAccepted only decides
    whether the policy version and acceptance date are stamped on the account.
    """

    privacy_policy_accepted: bool = False


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(CamelModel):
    """A user as exposed by the API. There is no password field at all."""

    id: int
    username: str
    role: Role
    created_at: datetime
    last_login: Optional[datetime] = None
    privacy_policy_accepted: bool = False
    privacy_policy_version: Optional[str] = None
    privacy_policy_accepted_date: Optional[datetime] = None


class LoginResponse(CamelModel):
    token: str
    user: UserResponse
