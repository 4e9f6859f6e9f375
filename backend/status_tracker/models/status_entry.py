"""
Status Tracker Backend: StatusEntry SQLAlchemy Model
=====================================================

What:  ORM model representing the `status_entries` table.
Who:   Used by StatusService for inserts/reads/deletes and by Alembic.

Table Design:
    - Append-only: a status "update" inserts a new row carrying forward the
      fields the caller left out. Rows are never UPDATEd, so the table is
      its own audit trail.
    - user_id is free-form text (stringified user id or a named slot such
      as 'default_user'); there is no foreign key to users.
    - altitude is guarded by a CHECK constraint in addition to the request
      schema, so out-of-range values cannot be stored by any path.
    - last_water_intake keeps the client's ISO string verbatim.

Index (user_id, created_at):
    Every query filters by user and orders by creation time.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from status_tracker.database import Base, UTCDateTime, utcnow

DEFAULT_USER_ID = "default_user"
MIN_ALTITUDE = 1
MAX_ALTITUDE = 10


class StatusEntry(Base):
    """
    One immutable hydration + altitude record.

    Query Patterns:
        - Latest: WHERE user_id = ? ORDER BY created_at DESC, id DESC LIMIT 1
        - History: same ordering with LIMIT n
        - Stats: COUNT/AVG over user_id
    """

    __tablename__ = "status_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_USER_ID,
        server_default=DEFAULT_USER_ID,
    )

    last_water_intake: Mapped[str] = mapped_column(String(64), nullable=False)

    altitude: Mapped[int] = mapped_column(Integer, nullable=False)

    last_updated: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            f"altitude >= {MIN_ALTITUDE} AND altitude <= {MAX_ALTITUDE}",
            name="ck_status_entries_altitude_range",
        ),
        Index("idx_status_entries_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<StatusEntry(id={self.id}, user_id='{self.user_id}', "
            f"altitude={self.altitude}, created_at='{self.created_at}')>"
        )
