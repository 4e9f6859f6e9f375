"""
Status Tracker Backend: Auth Service
=====================================

What:  Account registration, credential checks, token issuing, and user
       administration.
How:   bcrypt hashes via status_tracker.security; signed JWTs carrying
       {userId, username, role}; SQLAlchemy queries against `users`.
Who:   Called by the /api/auth route handlers, the auth dependency and the
       create-admin script.

Login Flow:
    ┌──────────┐   ┌──────────────┐   ┌──────────────┐   ┌────────────┐
    │ username │──▶│ lookup user  │──▶│ bcrypt check │──▶│ last_login │──▶ token
    └──────────┘   └──────────────┘   └──────────────┘   └────────────┘
                          │ none             │ mismatch
                          └──────────┬───────┘
                                     ▼
                       401 "Invalid credentials"

    Both failure branches raise the identical error so the response never
    reveals whether the username exists.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from status_tracker.config import settings
from status_tracker.database import utcnow
from status_tracker.exceptions import (
    AuthenticationError,
    DatabaseError,
    InvalidOperationError,
    NotFoundError,
    StatusTrackerError,
    ValidationError,
)
from status_tracker.models.user import ROLE_ADMIN, ROLE_VIEWER, User
from status_tracker.schemas.auth import LoginResponse, UserResponse
from status_tracker.security import (
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """
    Business logic for accounts and authentication.

    Every method takes the request's AsyncSession as its first argument.
    Returned users are always UserResponse models, which have no password
    field, so a hash can never leak through a response.
    """

    async def _find_by_username(self, db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def register(
        self,
        db: AsyncSession,
        username: str,
        password: str,
        role: str = ROLE_VIEWER,
        privacy_policy_accepted: bool = False,
    ) -> UserResponse:
        """
        Create an account with a bcrypt-hashed password.

        Raises:
            ValidationError: username already taken
            DatabaseError: insert failed
        """
        try:
            if await self._find_by_username(db, username) is not None:
                raise ValidationError("Username already exists")

            # bcrypt is CPU-bound; keep it off the event loop
            password_hash = await run_in_threadpool(hash_password, password)
            now = utcnow()
            user = User(
                username=username,
                password_hash=password_hash,
                role=role,
                created_at=now,
                privacy_policy_accepted=privacy_policy_accepted,
                privacy_policy_version=(
                    settings.privacy_policy_version if privacy_policy_accepted else None
                ),
                privacy_policy_accepted_date=now if privacy_policy_accepted else None,
            )
            db.add(user)
            await db.flush()
        except StatusTrackerError:
            raise
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same name
            if "UNIQUE" in str(e.orig).upper():
                raise ValidationError("Username already exists")
            logger.error("Integrity error creating user %s: %s", username, e)
            raise DatabaseError("Failed to create user", original_error=e)
        except Exception as e:
            logger.error("Database error creating user %s: %s", username, e)
            raise DatabaseError("Failed to create user", original_error=e)

        logger.info("User %s created (id=%s, role=%s)", username, user.id, role)
        return UserResponse.model_validate(user)

    async def login(self, db: AsyncSession, username: str, password: str) -> LoginResponse:
        """
        Check credentials, stamp last_login and issue a token.

        Raises:
            AuthenticationError: unknown username or wrong password (same message)
            DatabaseError: lookup or last_login update failed
        """
        try:
            user = await self._find_by_username(db, username)
        except Exception as e:
            logger.error("Database error during login lookup: %s", e)
            raise DatabaseError("Failed to authenticate", original_error=e)

        if user is None or not await run_in_threadpool(
            verify_password, password, user.password_hash
        ):
            logger.warning("Failed login attempt for username '%s'", username)
            raise AuthenticationError(INVALID_CREDENTIALS)

        try:
            user.last_login = utcnow()
            await db.flush()
        except Exception as e:
            logger.error("Database error updating last_login for %s: %s", user.id, e)
            raise DatabaseError("Failed to authenticate", original_error=e)

        token = create_access_token(user_id=user.id, username=user.username, role=user.role)
        logger.info("User %s logged in", user.username)
        return LoginResponse(token=token, user=UserResponse.model_validate(user))

    async def get_current_user(self, db: AsyncSession, token: str) -> Optional[UserResponse]:
        """
        Resolve a bearer token to its user.

        Returns None for an invalid or expired token, or for a token whose
        user has since been deleted. The client treats None as "logged out"
        and discards its stored token.
        """
        try:
            payload = decode_access_token(token)
        except InvalidTokenError as e:
            logger.debug("Rejected token: %s", e)
            return None

        try:
            user = await db.get(User, payload.user_id)
        except Exception as e:
            logger.error("Database error resolving token user %s: %s", payload.user_id, e)
            raise DatabaseError("Failed to retrieve user", original_error=e)

        if user is None:
            return None
        return UserResponse.model_validate(user)

    async def get_user(self, db: AsyncSession, user_id: int) -> UserResponse:
        """
        Raises:
            NotFoundError: no such user
        """
        try:
            user = await db.get(User, user_id)
        except Exception as e:
            logger.error("Database error fetching user %s: %s", user_id, e)
            raise DatabaseError("Failed to retrieve user", original_error=e)

        if user is None:
            raise NotFoundError(resource="User")
        return UserResponse.model_validate(user)

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        """All users, newest first."""
        try:
            result = await db.execute(
                select(User).order_by(desc(User.created_at), desc(User.id))
            )
            users = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing users: %s", e)
            raise DatabaseError("Failed to retrieve users", original_error=e)

        return [UserResponse.model_validate(user) for user in users]

    async def list_admins(self, db: AsyncSession) -> List[UserResponse]:
        """Users with the admin role, oldest first (the order viewers pick from)."""
        try:
            result = await db.execute(
                select(User).where(User.role == ROLE_ADMIN).order_by(User.id)
            )
            admins = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing admins: %s", e)
            raise DatabaseError("Failed to retrieve admin users", original_error=e)

        return [UserResponse.model_validate(user) for user in admins]

    async def delete_user(self, db: AsyncSession, user_id: int, acting_user_id: int) -> None:
        """
        Delete an account. Status entries stored under the user are kept.

        Raises:
            InvalidOperationError: an admin targeting their own account
            NotFoundError: no such user
            DatabaseError: delete failed
        """
        if user_id == acting_user_id:
            raise InvalidOperationError("Cannot delete your own account")

        try:
            result = await db.execute(delete(User).where(User.id == user_id))
            deleted = result.rowcount or 0
        except Exception as e:
            logger.error("Database error deleting user %s: %s", user_id, e)
            raise DatabaseError("Failed to delete user", original_error=e)

        if deleted == 0:
            raise NotFoundError(resource="User")
        logger.info("User %s deleted by %s", user_id, acting_user_id)

    async def ensure_admin(self, db: AsyncSession, username: str, password: str) -> bool:
        """
        Create an admin account unless the username is already taken.

        Returns:
            True when a new admin was created, False when the name existed.
        """
        try:
            await self.register(db, username, password, role=ROLE_ADMIN)
        except ValidationError:
            logger.info("Admin user '%s' already exists", username)
            return False
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService()
