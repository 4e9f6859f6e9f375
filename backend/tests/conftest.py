"""
Status Tracker Backend: Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Tests run against a throwaway SQLite file; tables are created before
       and dropped after every test that touches the database.

Fixture Hierarchy:
    Function-scoped:
    ├── mock_db_session: AsyncMock session for service error paths
    ├── database: creates/drops all tables
    │   ├── db_session: real AsyncSession
    │   ├── admin_user / viewer_user: seeded accounts
    │   │   └── admin_headers / viewer_headers: Authorization headers
    │   └── test_client: HTTPX AsyncClient bound to a fresh app
    └── app: fresh FastAPI instance from create_app()
"""

import os
import tempfile

# Override settings BEFORE any status_tracker import; settings and the engine
# are built at import time
_TEST_DB_DIR = tempfile.mkdtemp(prefix="status_tracker_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"  # Minimum cost; hashing speed is irrelevant here
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("ADMIN_USERNAME", None)
os.environ.pop("ADMIN_PASSWORD", None)

from typing import Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from status_tracker.database import Base, async_session_factory, engine  # noqa: E402
from status_tracker.schemas.auth import UserResponse  # noqa: E402
from status_tracker.security import create_access_token  # noqa: E402
from status_tracker.services.auth_service import auth_service  # noqa: E402

import status_tracker.models  # noqa: E402,F401

ADMIN_PASSWORD = "adminpass123"
VIEWER_PASSWORD = "viewerpass123"


def auth_headers(user: UserResponse) -> Dict[str, str]:
    token = create_access_token(user_id=user.id, username=user.username, role=user.role)
    return {"Authorization": f"Bearer {token}"}


# ══════════════════════════════════════════════════════════════════════════
# Mocks
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.side_effect = OperationalError("x", {}, Exception())
        with pytest.raises(DatabaseError):
            await status_service.get_latest_status(mock_db_session, "u")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """Fresh schema per test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def admin_user(database) -> UserResponse:
    async with async_session_factory() as session:
        user = await auth_service.register(
            session, "admin", ADMIN_PASSWORD, role="admin"
        )
        await session.commit()
    return user


@pytest_asyncio.fixture
async def viewer_user(database) -> UserResponse:
    async with async_session_factory() as session:
        user = await auth_service.register(
            session, "viewer", VIEWER_PASSWORD, privacy_policy_accepted=True
        )
        await session.commit()
    return user


@pytest.fixture
def admin_headers(admin_user) -> Dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
def viewer_headers(viewer_user) -> Dict[str, str]:
    return auth_headers(viewer_user)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app():
    """
    A fresh application per test.

    ASGITransport does not run the lifespan, so tables come from the
    `database` fixture instead of startup.
    """
    from status_tracker.main import create_app
    return create_app()


@pytest_asyncio.fixture
async def test_client(app, database):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
