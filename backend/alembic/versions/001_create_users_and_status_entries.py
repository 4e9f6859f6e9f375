"""Create users and status_entries tables

Revision ID: 001
Revises: None
Create Date: 2025-06-25 00:00:00.000000+00:00

What:  Initial schema: accounts (`users`) and the append-only status history
       (`status_entries`).
How:   Portable column types so the same migration runs on SQLite and
       PostgreSQL. Timestamps are stored as naive UTC (see UTCDateTime).

Rollback: downgrade() drops both tables (all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        # bcrypt hash, never the plain password
        sa.Column("password_hash", sa.String(128), nullable=False),
        sa.Column("role", sa.String(10), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column(
            "privacy_policy_accepted",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("privacy_policy_version", sa.String(20), nullable=True),
        sa.Column("privacy_policy_accepted_date", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.CheckConstraint("role IN ('admin', 'viewer')", name="ck_users_role"),
    )

    op.create_table(
        "status_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        # Free-form owner key; no foreign key to users
        sa.Column(
            "user_id",
            sa.String(50),
            nullable=False,
            server_default="default_user",
        ),
        sa.Column("last_water_intake", sa.String(64), nullable=False),
        sa.Column("altitude", sa.Integer(), nullable=False),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "altitude >= 1 AND altitude <= 10",
            name="ck_status_entries_altitude_range",
        ),
    )

    # Every status query filters by user and orders by creation time
    op.create_index(
        "idx_status_entries_user_created",
        "status_entries",
        ["user_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("idx_status_entries_user_created", table_name="status_entries")
    op.drop_table("status_entries")
    op.drop_table("users")
