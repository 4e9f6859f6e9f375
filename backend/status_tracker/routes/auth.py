"""
Status Tracker Backend: Auth Route Handlers
============================================

What:  /api/auth endpoints: registration, login, current user, user
       administration and logout.
How:   Thin handlers: dependencies authenticate and gate by role, Pydantic
       validates the body, AuthService does the work.

Route Inventory:
    POST   /api/auth/register         public   viewer self-registration
    POST   /api/auth/login            public   issue token
    GET    /api/auth/me               any      current user
    POST   /api/auth/admin/register   admin    create user with explicit role
    GET    /api/auth/users            admin    list users
    GET    /api/auth/admins           any      list admin users
    DELETE /api/auth/users/{user_id}  admin    delete another user
    POST   /api/auth/logout           public   stateless acknowledgement
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from status_tracker.database import get_db_session
from status_tracker.exceptions import AuthenticationError
from status_tracker.routes.dependencies import bearer_scheme, get_current_user, require_admin
from status_tracker.schemas.auth import (
    CreateUserRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserResponse,
)
from status_tracker.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from status_tracker.security import TokenPayload
from status_tracker.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
}
_ADMIN_ERRORS = {
    **_AUTH_ERRORS,
    403: {"description": "Admin access required", "model": ErrorResponse},
}


@router.post(
    "/register",
    status_code=201,
    response_model=ApiResponse[UserResponse],
    responses={400: {"description": "Invalid input or duplicate username", "model": ErrorResponse}},
    summary="Register a viewer account",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    """Public registration; the role is always viewer."""
    user = await auth_service.register(
        db,
        username=body.username,
        password=body.password,
        role="viewer",
        privacy_policy_accepted=body.privacy_policy_accepted,
    )
    return ApiResponse(data=user, message="Account created successfully")


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in and receive a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[LoginResponse]:
    result = await auth_service.login(db, username=body.username, password=body.password)
    return ApiResponse(data=result, message="Login successful")


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    responses=_AUTH_ERRORS,
    summary="Get the current user",
)
async def me(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    _: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    """
    Resolve the token to a fresh user row.

    A structurally valid token whose user has been deleted is treated the
    same as an invalid token.
    """
    user = await auth_service.get_current_user(db, credentials.credentials)
    if user is None:
        raise AuthenticationError("Invalid token")
    return ApiResponse(data=user)


@router.post(
    "/admin/register",
    status_code=201,
    response_model=ApiResponse[UserResponse],
    responses={**_ADMIN_ERRORS, 400: {"description": "Invalid input", "model": ErrorResponse}},
    summary="Create a user with an explicit role (admin only)",
)
async def admin_register(
    body: CreateUserRequest,
    admin: TokenPayload = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    user = await auth_service.register(
        db,
        username=body.username,
        password=body.password,
        role=body.role,
    )
    logger.info("Admin %s created user %s with role %s", admin.username, user.username, user.role)
    return ApiResponse(data=user, message="User created successfully")


@router.get(
    "/users",
    response_model=ApiResponse[List[UserResponse]],
    responses=_ADMIN_ERRORS,
    summary="List all users (admin only)",
)
async def list_users(
    _: TokenPayload = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserResponse]]:
    users = await auth_service.list_users(db)
    return ApiResponse(data=users)


@router.get(
    "/admins",
    response_model=ApiResponse[List[UserResponse]],
    responses=_AUTH_ERRORS,
    summary="List admin users",
    description="Available to any authenticated user so viewers can pick whose status to follow.",
)
async def list_admins(
    _: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserResponse]]:
    admins = await auth_service.list_admins(db)
    return ApiResponse(data=admins)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    responses={
        **_ADMIN_ERRORS,
        400: {"description": "Cannot delete your own account", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete a user (admin only, not self)",
)
async def delete_user(
    user_id: int = Path(..., ge=1),
    admin: TokenPayload = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await auth_service.delete_user(db, user_id=user_id, acting_user_id=admin.user_id)
    return MessageResponse(message="User deleted successfully")


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Tokens are stateless; the client discards its copy.",
)
async def logout() -> MessageResponse:
    return MessageResponse(
        message="Logout successful. Please remove the token from client storage."
    )
