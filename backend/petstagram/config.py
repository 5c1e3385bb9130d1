"""
Petstagram Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the data access layer and Alembic.
When:  Loaded once at module import time; validated before app starts.

Environment variables:
    The database settings keep the short names used by the existing
    deployment scripts (DBHOST, DBUSER, DBPASSWORD). The lower-case field
    names are accepted as well, which is what tests use when they construct
    a Settings instance directly.

    DATABASE_URL, when set, overrides the individual DB* settings entirely.
    The test suite points it at a SQLite file through aiosqlite.
"""

from typing import Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL, make_url


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. The database password default is
    the literal string "nil", the fallback the deployment scripts expect.
    """

    # ── Database ──────────────────────────────────────────────────────────
    db_host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("DBHOST", "db_host"),
    )
    db_port: int = Field(
        default=5432,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("DBPORT", "db_port"),
    )
    db_name: str = Field(
        default="petstagram",
        validation_alias=AliasChoices("DBNAME", "db_name"),
    )
    db_user: str = Field(
        default="postgres",
        validation_alias=AliasChoices("DBUSER", "db_user"),
    )
    # Literal placeholder, not a null value
    db_password: str = Field(
        default="nil",
        validation_alias=AliasChoices("DBPASSWORD", "db_password"),
    )

    # Full URL override, e.g. sqlite+aiosqlite:///./test.db
    database_url: Optional[str] = Field(default=None)

    # ── Connection Pool ───────────────────────────────────────────────────
    # initial capacity → SQLAlchemy pool_size
    # max capacity     → pool_size + max_overflow
    db_pool_initial_capacity: int = Field(default=10, ge=1, le=100)
    db_pool_max_capacity: int = Field(default=50, ge=1, le=500)

    # Seconds a request waits for a pooled connection before failing
    db_pool_timeout: float = Field(default=30.0, gt=0, le=300)

    db_pool_pre_ping: bool = Field(default=True)

    # ── Schema Setup ──────────────────────────────────────────────────────
    # Abort startup when a table could not be created for a reason other
    # than "already exists"
    schema_fail_fast: bool = Field(default=True)

    # Bounded retry for transient connection failures during startup only
    schema_retry_attempts: int = Field(default=3, ge=1, le=10)
    schema_retry_min_wait: float = Field(default=1.0, ge=0, le=30)
    schema_retry_max_wait: float = Field(default=8.0, ge=0, le=120)

    # ── Reads ─────────────────────────────────────────────────────────────
    # Default ordering of comments by created_at: asc (oldest first) or desc
    comment_order: str = Field(default="asc")

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8080, ge=1024, le=65535)

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

    @field_validator("comment_order")
    @classmethod
    def validate_comment_order(cls, v: str) -> str:
        lower = v.lower()
        if lower not in {"asc", "desc"}:
            raise ValueError(f"Invalid comment_order '{v}'. Must be 'asc' or 'desc'")
        return lower

    @model_validator(mode="after")
    def validate_pool_capacity(self) -> "Settings":
        if self.db_pool_max_capacity < self.db_pool_initial_capacity:
            raise ValueError(
                "db_pool_max_capacity "
                f"({self.db_pool_max_capacity}) must be >= db_pool_initial_capacity "
                f"({self.db_pool_initial_capacity})"
            )
        return self

    @property
    def db_max_overflow(self) -> int:
        """Connections allowed beyond the initial capacity."""
        return self.db_pool_max_capacity - self.db_pool_initial_capacity

    @property
    def sqlalchemy_url(self) -> URL:
        """
        What:  The async SQLAlchemy URL for the configured database.
        How:   DATABASE_URL wins when present; otherwise the DB* settings are
               assembled into a postgresql+asyncpg URL. URL.create() quotes
               the password, so special characters are safe.
        """
        if self.database_url:
            return make_url(self.database_url)
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance, read by the app factory when no override is passed
settings = Settings()
