"""
Status Tracker Backend: Admin Seeding Tests
============================================

What we test:
    ✅ Startup seeding creates the configured admin once
    ✅ Seeding is skipped without credentials
    ✅ The create-admin script's coroutine and its missing-credentials exit code
"""

import pytest

from status_tracker.config import settings
from status_tracker.main import seed_admin
from status_tracker.scripts import create_admin as create_admin_script
from status_tracker.services.auth_service import auth_service


@pytest.mark.asyncio
async def test_seed_admin_creates_once(monkeypatch, db_session):
    monkeypatch.setattr(settings, "admin_username", "boss")
    monkeypatch.setattr(settings, "admin_password", "bosspass123")

    await seed_admin()
    await seed_admin()

    admins = await auth_service.list_admins(db_session)
    assert [a.username for a in admins] == ["boss"]


@pytest.mark.asyncio
async def test_seed_admin_skipped_without_credentials(monkeypatch, db_session):
    monkeypatch.setattr(settings, "admin_username", None)
    monkeypatch.setattr(settings, "admin_password", None)

    await seed_admin()

    assert await auth_service.list_users(db_session) == []


@pytest.mark.asyncio
async def test_create_admin_script(database, db_session):
    assert await create_admin_script.create_admin("ops", "opspass123") is True
    assert await create_admin_script.create_admin("ops", "opspass123") is False

    admins = await auth_service.list_admins(db_session)
    assert [a.username for a in admins] == ["ops"]


def test_script_requires_credentials(monkeypatch):
    monkeypatch.setattr(settings, "admin_username", None)
    monkeypatch.setattr(settings, "admin_password", None)
    assert create_admin_script.main() == 1
