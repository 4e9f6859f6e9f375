"""
Status Tracker Backend: Database Session Management
====================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   Creates an async engine over aiosqlite, provides a session dependency
       that commits on success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Connection Strategy:
    SQLite has a single writer and no server process, so there is nothing
    to pool: NullPool opens a connection per checkout and closes it on
    release. Each model call is one statement awaited to completion; there
    are no explicit transaction boundaries beyond the per-request session.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy import DateTime
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool
from sqlalchemy.types import TypeDecorator

from status_tracker.config import settings

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return
    if not url.database or url.database == ":memory:":
        return
    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for `database_url`."""
    _ensure_sqlite_directory(database_url)
    return create_async_engine(
        database_url,
        poolclass=NullPool,
        # SQL echo only when debugging; it is very noisy otherwise
        echo=settings.log_level == "DEBUG",
    )


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)

# expire_on_commit=False: ORM objects stay readable after the request's
# commit, when the response model is being serialized
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models register with this metadata, which is what Alembic compares
    against and what init_models() creates.
    """
    pass


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime column for SQLite.

    SQLite has no timestamp type; SQLAlchemy stores DateTime as ISO text and
    hands back naive values. This stores naive UTC and returns aware UTC so
    every datetime leaving the ORM serializes with an explicit offset.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session

    Example usage in a route:
        @router.get("/status")
        async def get_status(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models() -> None:
    """
    What:  Creates any missing tables from the ORM metadata.
    When:  Application startup when AUTO_CREATE_TABLES is on; test fixtures.
    """
    # Registers every model with Base.metadata before create_all runs
    import status_tracker.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables verified")


async def dispose_engine() -> None:
    """
    What:  Releases engine resources.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
