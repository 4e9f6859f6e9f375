"""
Status Tracker Backend: Application Configuration
==================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated again at app startup.

Design Decision:
    pydantic-settings over raw os.getenv(): type coercion (str → int/bool),
    range validation at startup, and one documented place for every knob.
"""

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST
    override JWT_SECRET (enforced by validate_required_for_production).
    """

    # ── Runtime Environment ───────────────────────────────────────────────
    # development: error responses include stack traces, unexpected error
    # messages are passed through to the client
    # production/test: generic messages only
    environment: str = Field(default="development")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Restricts ENVIRONMENT to the three supported modes."""
        valid = {"development", "production", "test"}
        lower = v.lower()
        if lower not in valid:
            raise ValueError(f"Invalid environment '{v}'. Must be one of: {valid}")
        return lower

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    # ── Database ──────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///<relative path> or sqlite+aiosqlite:////<absolute path>
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/status.db",
        description="Async SQLAlchemy URL for the SQLite database file",
    )

    # Create missing tables on startup (Alembic remains the source of truth
    # for schema changes on existing databases)
    auto_create_tables: bool = Field(default=True)

    # ── Authentication ────────────────────────────────────────────────────
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET)
    jwt_algorithm: str = Field(default="HS256")
    # Token lifetime; an expired token is rejected exactly like a forged one
    jwt_expires_hours: int = Field(default=24, ge=1, le=24 * 30)

    # bcrypt cost factor; tests drop it to 4
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)

    # Optional bootstrap admin (see scripts/create_admin.py)
    admin_username: Optional[str] = Field(default=None)
    admin_password: Optional[str] = Field(default=None)

    # ── Privacy Policy ────────────────────────────────────────────────────
    privacy_policy_version: str = Field(default="1.0")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list of frontend origins
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3001, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Rate Limiting ─────────────────────────────────────────────────────
    # General per-IP sliding window for every API path
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_requests: int = Field(default=100, ge=1, le=10000)
    rate_limit_window: int = Field(default=900, ge=1, le=86400)  # seconds

    # Stricter window for credential endpoints (login, register)
    auth_rate_limit_requests: int = Field(default=10, ge=1, le=1000)
    auth_rate_limit_window: int = Field(default=900, ge=1, le=86400)  # seconds

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # JWT_SECRET and jwt_secret both work
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that security-critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if self.is_production and self.jwt_secret == DEFAULT_JWT_SECRET:
            errors.append(
                "JWT_SECRET is still the development default. "
                "Set a long random value before running in production."
            )
        if self.is_production and len(self.jwt_secret) < 32:
            errors.append("JWT_SECRET must be at least 32 characters in production.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
