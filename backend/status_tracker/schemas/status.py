"""
Status Tracker Backend: Status Request/Response Schemas
========================================================

What:  Pydantic models for creating/updating status entries and for the
       entry, history and stats payloads.

Validation rules:
    lastWaterIntake:  UTC ISO 8601 datetime string with seconds and a trailing Z,
                      e.g. "2024-01-15T08:30:00Z" or "2024-01-15T08:30:00.123Z"
    altitude:         strict integer in [1, 10]; 7.0, "7" and true are rejected
    Update bodies:    both fields optional, at least one required
"""

import re
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, Field, StrictInt, model_validator
from pydantic_core import PydanticCustomError

from status_tracker.models.status_entry import MAX_ALTITUDE, MIN_ALTITUDE
from status_tracker.schemas.common import CamelModel


# UTC only, seconds required: 2024-01-15T08:30:00Z, 2024-01-15T08:30:00.123Z
ISO_UTC_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z")


def _validate_iso_datetime(value: str) -> str:
    """Accept UTC ISO 8601 datetimes ending in Z; keep the original text."""
    if not ISO_UTC_PATTERN.fullmatch(value):
        raise PydanticCustomError("iso_datetime", "must be a valid ISO datetime string")
    date_part, _, rest = value[:-1].partition("T")
    try:
        # fromisoformat only takes up to 6 fractional digits before 3.11
        datetime.fromisoformat(f"{date_part}T{rest[:8]}")
    except ValueError:
        raise PydanticCustomError("iso_datetime", "must be a valid ISO datetime string")
    return value


IsoDatetimeStr = Annotated[str, AfterValidator(_validate_iso_datetime)]

Altitude = Annotated[StrictInt, Field(ge=MIN_ALTITUDE, le=MAX_ALTITUDE)]


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class CreateStatusRequest(CamelModel):
    last_water_intake: IsoDatetimeStr
    altitude: Altitude


class UpdateStatusRequest(CamelModel):
    """
    Partial status. Omitted (or null) fields are carried forward from the
    user's latest entry when the new row is appended.
    """

    last_water_intake: Optional[IsoDatetimeStr] = None
    altitude: Optional[Altitude] = None

    @model_validator(mode="after")
    def require_one_field(self) -> "UpdateStatusRequest":
        if self.last_water_intake is None and self.altitude is None:
            raise PydanticCustomError(
                "empty_update",
                "At least one field (lastWaterIntake or altitude) must be provided",
            )
        return self


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class StatusResponse(CamelModel):
    """One stored status entry."""

    id: int
    user_id: str
    last_water_intake: str
    altitude: int
    last_updated: datetime
    created_at: datetime


class StatsResponse(CamelModel):
    """
    Aggregates over a user's whole history.

    Empty history: {"totalEntries": 0, "averageAltitude": 0, "lastActivityDate": null}
    """

    total_entries: int = Field(ge=0)
    average_altitude: float = Field(description="Mean altitude rounded to 2 decimals")
    last_activity_date: Optional[datetime] = None
