"""
Status Tracker Backend: User SQLAlchemy Model
==============================================

What:  ORM model representing the `users` table.
Who:   Used by AuthService and by Alembic.

Table Design:
    - username is UNIQUE; the service checks first, the constraint settles races.
    - password_hash holds a bcrypt hash (~60 chars), never the plain text.
    - role is fixed at creation and limited to 'admin' / 'viewer' by a CHECK.
    - privacy_policy_* record which policy version the user accepted, and when.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from status_tracker.database import Base, UTCDateTime, utcnow

ROLE_ADMIN = "admin"
ROLE_VIEWER = "viewer"
ROLES = (ROLE_ADMIN, ROLE_VIEWER)


class User(Base):
    """An account that can log in; admins manage users and write status entries."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)

    role: Mapped[str] = mapped_column(String(10), nullable=False, default=ROLE_VIEWER)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
    )

    last_login: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
        default=None,
    )

    privacy_policy_accepted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    privacy_policy_version: Mapped[Optional[str]] = mapped_column(
        String(20),
        nullable=True,
        default=None,
    )

    privacy_policy_accepted_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
        default=None,
    )

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'viewer')", name="ck_users_role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
