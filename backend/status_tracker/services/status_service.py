"""
Status Tracker Backend: Status Service
=======================================

What:  Records and retrieves a user's hydration/altitude entries.
How:   Thin layer over the status_entries table using async SQLAlchemy.
Who:   Called by the /api/status route handlers.

Append-only semantics:
    create_status and update_status both INSERT. An update reads the latest
    row, overlays the provided fields and inserts the merged result. There
    is no UPDATE statement anywhere in this service.

    Known race: two concurrent updates for the same user can both read the
    same latest row before either insert lands; the second insert then
    silently drops the first update's fields. Single-user write traffic
    makes this acceptable.

Error Handling Strategy:
    NotFoundError propagates unchanged. Every other failure is logged and
    wrapped in DatabaseError with the driver exception attached, so the
    global handler can still recognise CHECK constraint violations.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from status_tracker.database import utcnow
from status_tracker.exceptions import DatabaseError, StatusTrackerError, NotFoundError
from status_tracker.models.status_entry import StatusEntry
from status_tracker.schemas.status import (
    CreateStatusRequest,
    StatsResponse,
    StatusResponse,
    UpdateStatusRequest,
)

logger = logging.getLogger(__name__)


def _round_average(total: float) -> float:
    """Round half-up to 2 decimals (1.005 → 1.01, not banker's rounding)."""
    return float(Decimal(str(total)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class StatusService:
    """
    Business logic for status entries.

    Responsibilities:
        - get_latest_status(): newest entry or None
        - create_status(): insert a new entry stamped with the current time
        - update_status(): merge partial fields onto the latest entry, insert
        - get_status_history(): newest-first slice of the history
        - delete_all_status(): remove every entry for a user
        - get_user_stats(): count / mean altitude / last activity
    """

    async def _latest_entry(self, db: AsyncSession, user_id: str) -> Optional[StatusEntry]:
        result = await db.execute(
            select(StatusEntry)
            .where(StatusEntry.user_id == user_id)
            .order_by(desc(StatusEntry.created_at), desc(StatusEntry.id))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _insert(
        self,
        db: AsyncSession,
        user_id: str,
        last_water_intake: str,
        altitude: int,
    ) -> StatusEntry:
        now = utcnow()
        entry = StatusEntry(
            user_id=user_id,
            last_water_intake=last_water_intake,
            altitude=altitude,
            last_updated=now,
            created_at=now,
        )
        db.add(entry)
        # Flush so constraint violations surface here rather than at commit
        await db.flush()
        return entry

    async def get_latest_status(
        self, db: AsyncSession, user_id: str
    ) -> Optional[StatusResponse]:
        """
        Most recent entry by creation time, or None when the user has none.

        Raises:
            DatabaseError: query failed
        """
        try:
            entry = await self._latest_entry(db, user_id)
        except Exception as e:
            logger.error("Database error fetching latest status for %s: %s", user_id, e)
            raise DatabaseError("Failed to retrieve latest status", original_error=e)

        if entry is None:
            return None
        return StatusResponse.model_validate(entry)

    async def create_status(
        self, db: AsyncSession, data: CreateStatusRequest, user_id: str
    ) -> StatusResponse:
        """
        Insert a new entry; last_updated and created_at are both "now".

        Raises:
            DatabaseError: insert failed (including CHECK constraint violations)
        """
        try:
            entry = await self._insert(
                db,
                user_id=user_id,
                last_water_intake=data.last_water_intake,
                altitude=data.altitude,
            )
        except Exception as e:
            logger.error("Database error creating status for %s: %s", user_id, e)
            raise DatabaseError("Failed to create status", original_error=e)

        logger.info("Status entry %s created for %s", entry.id, user_id)
        return StatusResponse.model_validate(entry)

    async def update_status(
        self, db: AsyncSession, data: UpdateStatusRequest, user_id: str
    ) -> StatusResponse:
        """
        Append a new entry that merges `data` onto the latest entry.

        Raises:
            NotFoundError: the user has no entry yet (create one first)
            DatabaseError: read or insert failed
        """
        try:
            current = await self._latest_entry(db, user_id)
            if current is None:
                raise NotFoundError(
                    resource="Status",
                    message="No existing status found for user. Create a status first.",
                )

            last_water_intake = (
                data.last_water_intake
                if data.last_water_intake is not None
                else current.last_water_intake
            )
            altitude = data.altitude if data.altitude is not None else current.altitude

            entry = await self._insert(
                db,
                user_id=user_id,
                last_water_intake=last_water_intake,
                altitude=altitude,
            )
        except StatusTrackerError:
            raise
        except Exception as e:
            logger.error("Database error updating status for %s: %s", user_id, e)
            raise DatabaseError("Failed to update status", original_error=e)

        logger.info("Status entry %s appended for %s", entry.id, user_id)
        return StatusResponse.model_validate(entry)

    async def get_status_history(
        self, db: AsyncSession, user_id: str, limit: int = 10
    ) -> List[StatusResponse]:
        """
        The `limit` most recent entries, newest first.

        Raises:
            DatabaseError: query failed
        """
        try:
            result = await db.execute(
                select(StatusEntry)
                .where(StatusEntry.user_id == user_id)
                .order_by(desc(StatusEntry.created_at), desc(StatusEntry.id))
                .limit(limit)
            )
            entries = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error fetching history for %s: %s", user_id, e)
            raise DatabaseError("Failed to retrieve status history", original_error=e)

        return [StatusResponse.model_validate(entry) for entry in entries]

    async def delete_all_status(self, db: AsyncSession, user_id: str) -> int:
        """
        Delete every entry for `user_id` and return how many were removed.

        Raises:
            NotFoundError: nothing to delete
            DatabaseError: delete failed
        """
        try:
            result = await db.execute(
                delete(StatusEntry).where(StatusEntry.user_id == user_id)
            )
            deleted = result.rowcount or 0
        except Exception as e:
            logger.error("Database error deleting status for %s: %s", user_id, e)
            raise DatabaseError("Failed to delete status entries", original_error=e)

        if deleted == 0:
            raise NotFoundError(
                resource="Status",
                message="No status entries found for user",
            )

        logger.info("Deleted %d status entries for %s", deleted, user_id)
        return deleted

    async def get_user_stats(self, db: AsyncSession, user_id: str) -> StatsResponse:
        """
        Count, mean altitude (2 decimals, half-up) and the latest entry's
        last_updated. Zero-valued for an empty history.

        Raises:
            DatabaseError: query failed
        """
        try:
            result = await db.execute(
                select(
                    func.count(StatusEntry.id),
                    func.avg(StatusEntry.altitude),
                ).where(StatusEntry.user_id == user_id)
            )
            total_entries, average = result.one()
            latest = await self._latest_entry(db, user_id) if total_entries else None
        except Exception as e:
            logger.error("Database error computing stats for %s: %s", user_id, e)
            raise DatabaseError("Failed to retrieve user statistics", original_error=e)

        if not total_entries:
            return StatsResponse(total_entries=0, average_altitude=0, last_activity_date=None)

        return StatsResponse(
            total_entries=total_entries,
            average_altitude=_round_average(float(average)),
            last_activity_date=latest.last_updated if latest else None,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless: the session is passed in per call
status_service = StatusService()
