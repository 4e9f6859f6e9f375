"""
Status Tracker Backend: Create Admin Script
============================================

What:  Creates the admin account named by ADMIN_USERNAME / ADMIN_PASSWORD.
How:   Ensures the tables exist, then calls AuthService.ensure_admin().

Usage:
    ADMIN_USERNAME=admin ADMIN_PASSWORD=securepassword123 status-tracker-create-admin

Exit codes:
    0  admin created, or the username already exists
    1  credentials missing or the database write failed
"""

import asyncio
import logging
import sys

from status_tracker.config import settings
from status_tracker.database import async_session_factory, dispose_engine, init_models
from status_tracker.exceptions import StatusTrackerError
from status_tracker.services.auth_service import auth_service

logger = logging.getLogger("status_tracker.scripts.create_admin")


async def create_admin(username: str, password: str) -> bool:
    """Returns True when a new admin was created."""
    await init_models()
    try:
        async with async_session_factory() as session:
            created = await auth_service.ensure_admin(session, username, password)
            await session.commit()
    finally:
        await dispose_engine()
    return created


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    username = settings.admin_username
    password = settings.admin_password
    if not username or not password:
        logger.error("Admin credentials not provided.")
        logger.error("Set ADMIN_USERNAME and ADMIN_PASSWORD environment variables.")
        return 1

    try:
        created = asyncio.run(create_admin(username, password))
    except StatusTrackerError as e:
        logger.error("Failed to create admin user: %s", e.message)
        return 1

    if created:
        logger.info("Admin user '%s' created", username)
    else:
        logger.info("Admin user '%s' already exists", username)
    return 0


if __name__ == "__main__":
    sys.exit(main())
