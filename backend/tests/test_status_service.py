"""
Status Tracker Backend: Status Service Tests
============================================

What:  StatusService against a real SQLite database, plus mocked sessions
       for the failure paths.

What we test:
    ✅ Latest entry (none, newest wins, per-user isolation)
    ✅ Update merges onto the latest entry and appends a new row
    ✅ Update without any prior entry raises NotFoundError
    ✅ History ordering and limit
    ✅ Delete-all count and NotFoundError on an empty history
    ✅ Stats: empty history, mean altitude rounding, last activity
    ✅ CHECK constraint and driver failures surface as DatabaseError
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from status_tracker.exceptions import DatabaseError, NotFoundError
from status_tracker.models.status_entry import StatusEntry
from status_tracker.schemas.status import CreateStatusRequest, UpdateStatusRequest
from status_tracker.services.status_service import StatusService, _round_average

USER = "alice"


def create_request(altitude: int, when: str = "2024-01-15T08:30:00Z") -> CreateStatusRequest:
    return CreateStatusRequest(last_water_intake=when, altitude=altitude)


class TestLatestAndCreate:

    def setup_method(self):
        self.service = StatusService()

    @pytest.mark.asyncio
    async def test_no_entries_returns_none(self, db_session):
        assert await self.service.get_latest_status(db_session, USER) is None

    @pytest.mark.asyncio
    async def test_create_returns_entry(self, db_session):
        entry = await self.service.create_status(db_session, create_request(7), USER)

        assert entry.id is not None
        assert entry.user_id == USER
        assert entry.altitude == 7
        assert entry.last_water_intake == "2024-01-15T08:30:00Z"
        assert entry.created_at == entry.last_updated
        assert entry.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_latest_is_newest(self, db_session):
        await self.service.create_status(db_session, create_request(3), USER)
        second = await self.service.create_status(db_session, create_request(9), USER)

        latest = await self.service.get_latest_status(db_session, USER)
        assert latest.id == second.id
        assert latest.altitude == 9

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, db_session):
        await self.service.create_status(db_session, create_request(3), USER)
        assert await self.service.get_latest_status(db_session, "bob") is None


class TestUpdate:

    def setup_method(self):
        self.service = StatusService()

    @pytest.mark.asyncio
    async def test_update_without_existing_raises(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.update_status(db_session, UpdateStatusRequest(altitude=4), USER)
        assert exc_info.value.message == "No existing status found for user. Create a status first."

    @pytest.mark.asyncio
    async def test_update_merges_and_appends(self, db_session):
        first = await self.service.create_status(db_session, create_request(5), USER)

        updated = await self.service.update_status(
            db_session, UpdateStatusRequest(altitude=8), USER
        )

        assert updated.id != first.id
        assert updated.altitude == 8
        assert updated.last_water_intake == first.last_water_intake

        history = await self.service.get_status_history(db_session, USER)
        assert [e.altitude for e in history] == [8, 5]

    @pytest.mark.asyncio
    async def test_update_water_intake_only(self, db_session):
        await self.service.create_status(db_session, create_request(6), USER)

        updated = await self.service.update_status(
            db_session,
            UpdateStatusRequest(last_water_intake="2024-01-16T10:00:00Z"),
            USER,
        )
        assert updated.altitude == 6
        assert updated.last_water_intake == "2024-01-16T10:00:00Z"


class TestHistoryAndDelete:

    def setup_method(self):
        self.service = StatusService()

    @pytest.mark.asyncio
    async def test_history_newest_first_with_limit(self, db_session):
        for altitude in range(1, 6):
            await self.service.create_status(db_session, create_request(altitude), USER)

        history = await self.service.get_status_history(db_session, USER, limit=3)
        assert [e.altitude for e in history] == [5, 4, 3]

    @pytest.mark.asyncio
    async def test_history_empty(self, db_session):
        assert await self.service.get_status_history(db_session, USER) == []

    @pytest.mark.asyncio
    async def test_delete_all(self, db_session):
        await self.service.create_status(db_session, create_request(2), USER)
        await self.service.create_status(db_session, create_request(4), USER)
        await self.service.create_status(db_session, create_request(4), "bob")

        assert await self.service.delete_all_status(db_session, USER) == 2
        assert await self.service.get_latest_status(db_session, USER) is None
        assert await self.service.get_latest_status(db_session, "bob") is not None

    @pytest.mark.asyncio
    async def test_delete_all_empty_raises(self, db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.delete_all_status(db_session, USER)
        assert exc_info.value.message == "No status entries found for user"


class TestStats:

    def setup_method(self):
        self.service = StatusService()

    @pytest.mark.asyncio
    async def test_empty(self, db_session):
        stats = await self.service.get_user_stats(db_session, USER)
        assert stats.total_entries == 0
        assert stats.average_altitude == 0
        assert stats.last_activity_date is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "altitudes, expected",
        [([8, 6, 7], 7), ([1, 2], 1.5), ([1, 1, 2], 1.33), ([2, 2, 3], 2.33), ([10], 10)],
    )
    async def test_average(self, db_session, altitudes, expected):
        for altitude in altitudes:
            await self.service.create_status(db_session, create_request(altitude), USER)

        stats = await self.service.get_user_stats(db_session, USER)
        assert stats.total_entries == len(altitudes)
        assert stats.average_altitude == expected

    @pytest.mark.asyncio
    async def test_last_activity_is_latest_entry(self, db_session):
        await self.service.create_status(db_session, create_request(3), USER)
        latest = await self.service.create_status(db_session, create_request(4), USER)

        stats = await self.service.get_user_stats(db_session, USER)
        assert stats.last_activity_date == latest.last_updated

    def test_round_half_up(self):
        assert _round_average(1.005) == 1.01
        assert _round_average(2.675) == 2.68
        assert _round_average(7.0) == 7.0


class TestFailures:

    def setup_method(self):
        self.service = StatusService()

    @pytest.mark.asyncio
    async def test_table_rejects_out_of_range_altitude(self, db_session):
        # Bypass the request schema to hit the table's CHECK constraint
        db_session.add(StatusEntry(user_id=USER, last_water_intake="x", altitude=11))
        with pytest.raises(IntegrityError) as exc_info:
            await db_session.flush()
        assert "CHECK constraint failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_create_wraps_constraint_violation(self, db_session):
        data = CreateStatusRequest.model_construct(
            last_water_intake="2024-01-15T08:30:00Z", altitude=0
        )
        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_status(db_session, data, USER)
        assert "CHECK constraint failed" in str(exc_info.value.original_error)

    @pytest.mark.asyncio
    async def test_query_failure_wrapped(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("disk I/O error"))
        )
        with pytest.raises(DatabaseError) as exc_info:
            await self.service.get_latest_status(mock_db_session, USER)
        assert isinstance(exc_info.value.original_error, OperationalError)

    @pytest.mark.asyncio
    async def test_not_found_not_wrapped(self, mock_db_session):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db_session.execute = AsyncMock(return_value=result)

        with pytest.raises(NotFoundError):
            await self.service.update_status(
                mock_db_session, UpdateStatusRequest(altitude=4), USER
            )
