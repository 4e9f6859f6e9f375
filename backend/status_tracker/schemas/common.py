"""
Status Tracker Backend: Shared Response Envelopes
==================================================

What:  The success/error envelopes every endpoint responds with, plus the
       camelCase base model used by all request/response schemas.

Envelopes:
    Success:  {"success": true,  "data": <payload>, "message": "..." | null}
    Error:    {"success": false, "error": "...", "code": "...", "stack"?: "..."}

    `stack` is only present in development mode.
"""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base for API models: snake_case in Python, camelCase on the wire.

    populate_by_name lets services build instances with Python names;
    from_attributes lets ORM rows be validated directly.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapping any payload."""

    success: bool = Field(default=True)
    data: Optional[T] = Field(default=None)
    message: Optional[str] = Field(default=None, description="Human-readable outcome")


class MessageResponse(BaseModel):
    """Success envelope for operations without a payload (delete, logout)."""

    success: bool = Field(default=True)
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for all API errors.

    Example:
        {
            "success": false,
            "error": "altitude: Input should be less than or equal to 10",
            "code": "VALIDATION_ERROR"
        }
    """

    success: bool = Field(default=False)
    error: str = Field(description="Human-readable error description")
    code: str = Field(description="Machine-readable error code")
    stack: Optional[str] = Field(default=None, description="Traceback (development only)")


class HealthData(CamelModel):
    timestamp: datetime
    uptime: float = Field(description="Seconds since the service started")
    version: str
    environment: str
    database: str = Field(description="connected | disconnected")


class HealthResponse(BaseModel):
    """Liveness payload returned by GET /health."""

    success: bool
    message: str
    data: HealthData
