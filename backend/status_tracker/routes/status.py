"""
Status Tracker Backend: Status Route Handlers
==============================================

What:  /api/status endpoints: latest entry, history, stats (any
       authenticated user) and create/update/delete (admins only).
How:   Every endpoint targets one `userId` query parameter. When it is
       omitted the caller's own user id is used.
Who:   Called by the frontend dashboard and the admin status editor.

Route Inventory:
    GET    /api/status           any     latest entry or null
    POST   /api/status           admin   append a full entry
    PUT    /api/status           admin   append a merged partial entry
    DELETE /api/status           admin   remove the user's whole history
    GET    /api/status/history   any     newest-first slice, limit 1-100
    GET    /api/status/stats     any     count / mean altitude / last activity
"""

import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from status_tracker.database import get_db_session
from status_tracker.routes.dependencies import get_current_user, require_admin
from status_tracker.schemas.auth import USERNAME_PATTERN
from status_tracker.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from status_tracker.schemas.status import (
    CreateStatusRequest,
    StatsResponse,
    StatusResponse,
    UpdateStatusRequest,
)
from status_tracker.security import TokenPayload
from status_tracker.services.status_service import status_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/status", tags=["Status"])

_READ_ERRORS = {
    400: {"description": "Invalid query parameters", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
}
_WRITE_ERRORS = {
    **_READ_ERRORS,
    403: {"description": "Admin access required", "model": ErrorResponse},
}


UserIdQuery = Annotated[
    Optional[str],
    Query(
        alias="userId",
        min_length=1,
        max_length=50,
        pattern=USERNAME_PATTERN,
        description="Whose entries to operate on. Defaults to the caller's own user id.",
    ),
]


def _target_user_id(user_id: Optional[str], current_user: TokenPayload) -> str:
    return user_id if user_id is not None else str(current_user.user_id)


@router.get(
    "",
    response_model=ApiResponse[StatusResponse],
    responses=_READ_ERRORS,
    summary="Get the latest status entry",
    description="Returns the newest entry for the user, or `data: null` when there is none.",
)
async def get_latest_status(
    current_user: TokenPayload = Depends(get_current_user),
    user_id: UserIdQuery = None,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[StatusResponse]:
    status = await status_service.get_latest_status(db, _target_user_id(user_id, current_user))
    return ApiResponse(data=status)


@router.post(
    "",
    status_code=201,
    response_model=ApiResponse[StatusResponse],
    responses=_WRITE_ERRORS,
    summary="Create a status entry (admin only)",
)
async def create_status(
    body: CreateStatusRequest,
    current_user: TokenPayload = Depends(require_admin),
    user_id: UserIdQuery = None,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[StatusResponse]:
    status = await status_service.create_status(
        db, body, _target_user_id(user_id, current_user)
    )
    return ApiResponse(data=status, message="Status created successfully")


@router.put(
    "",
    response_model=ApiResponse[StatusResponse],
    responses={
        **_WRITE_ERRORS,
        404: {"description": "User has no status entry yet", "model": ErrorResponse},
    },
    summary="Update the status (admin only)",
    description=(
        "Appends a new entry built from the latest one with the provided fields "
        "overlaid. History is never rewritten."
    ),
)
async def update_status(
    body: UpdateStatusRequest,
    current_user: TokenPayload = Depends(require_admin),
    user_id: UserIdQuery = None,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[StatusResponse]:
    status = await status_service.update_status(
        db, body, _target_user_id(user_id, current_user)
    )
    return ApiResponse(data=status, message="Status updated successfully")


@router.delete(
    "",
    response_model=MessageResponse,
    responses={
        **_WRITE_ERRORS,
        404: {"description": "No entries to delete", "model": ErrorResponse},
    },
    summary="Delete every status entry for a user (admin only)",
)
async def delete_all_status(
    current_user: TokenPayload = Depends(require_admin),
    user_id: UserIdQuery = None,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    target = _target_user_id(user_id, current_user)
    await status_service.delete_all_status(db, target)
    logger.info("Admin %s cleared status history of %s", current_user.username, target)
    return MessageResponse(message="All status entries deleted successfully")


@router.get(
    "/history",
    response_model=ApiResponse[List[StatusResponse]],
    responses=_READ_ERRORS,
    summary="Get recent status history",
)
async def get_status_history(
    current_user: TokenPayload = Depends(get_current_user),
    user_id: UserIdQuery = None,
    limit: int = Query(
        default=10, ge=1, le=100,
        description="Number of entries to return, newest first (max 100)",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[StatusResponse]]:
    history = await status_service.get_status_history(
        db, _target_user_id(user_id, current_user), limit=limit
    )
    return ApiResponse(data=history)


@router.get(
    "/stats",
    response_model=ApiResponse[StatsResponse],
    responses=_READ_ERRORS,
    summary="Get aggregate statistics",
)
async def get_user_stats(
    current_user: TokenPayload = Depends(get_current_user),
    user_id: UserIdQuery = None,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[StatsResponse]:
    stats = await status_service.get_user_stats(db, _target_user_id(user_id, current_user))
    return ApiResponse(data=stats)
