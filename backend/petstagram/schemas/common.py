"""
Petstagram Backend — Shared Schema Building Blocks
====================================================

What:  The camelCase base model, the UTC timestamp type, and the error and
       health response models used by every router.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def ensure_utc(value: datetime) -> datetime:
    """
    Normalise a timestamp to UTC.

    SQLite hands back naive datetimes even for timezone-aware columns; those
    are stored as UTC, so they are tagged rather than converted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Serializes as ISO 8601 with a trailing "Z", e.g. 2020-04-01T12:00:00Z
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """
    Base for entity schemas.

    Accepts both camelCase (wire) and snake_case (Python) field names on
    input and emits camelCase when FastAPI serializes a response.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "not_found",
            "message": "post with ID '...' was not found",
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
