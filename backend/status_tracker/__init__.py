"""
Status Tracker Backend: Application Package
============================================

What: Marks the `status_tracker` directory as a Python package.
Who:  Imported by uvicorn, Alembic, pytest and the create-admin script.

Architecture Note:
    The backend follows the same layered layout throughout:

    ┌─────────────────────────────────────┐
    │      Routes + Dependencies (API)    │  ← HTTP, auth header, role gate
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← AuthService, StatusService
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (Persistence)         │  ← Async SQLAlchemy over SQLite
    └─────────────────────────────────────┘

    Routes never touch SQL directly; services never see HTTP objects.
"""

__version__ = "1.0.0"
