"""
RecipeHub Backend — Shared Schemas
====================================

What:  Base model configuration plus the small models every resource shares
       (author summary, like entry, message/error/health responses).
"""

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for every API schema.

    Fields are declared in snake_case and exposed in camelCase
    (`cooking_time` ↔ `cookingTime`). Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def require_text(value: Optional[str], message: str) -> Optional[str]:
    """Rejects blank strings with `message`; None passes through untouched."""
    if value is None:
        return value
    stripped = value.strip()
    if not stripped:
        raise ValueError(message)
    return stripped


class UserSummary(ApiModel):
    """Owner/author inlined into recipe and folder responses."""

    id: uuid.UUID
    name: Optional[str] = None
    avatar: Optional[str] = None


class LikeEntry(ApiModel):
    user: uuid.UUID = Field(description="The user who liked the entity")


class MessageResponse(ApiModel):
    """Returned by delete endpoints, e.g. {"msg": "Recipe removed"}."""

    msg: str


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors. Keys stay snake_case.

    Example:
        {
            "error": "forbidden",
            "message": "User not authorized",
            "request_id": "1f2e3d4c"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(ApiModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
