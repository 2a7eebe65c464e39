"""
RecipeHub Backend — Shared Pydantic Schemas
=============================================

What:  The base model every API schema derives from, plus response shapes
       shared by several resources (errors, plain messages, health).
How:   APIModel renders snake_case attributes as camelCase JSON keys
       (cooking_time → cookingTime) and accepts either spelling on input.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class AuthorRef(APIModel):
    """A user reference resolved to its username."""
    id: uuid.UUID = Field(description="User identifier")
    username: str = Field(description="Account name")


class MessageResponse(APIModel):
    message: str = Field(description="Human-readable outcome")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "not_found")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which fields were missing)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "conflict",
            "message": "Duplicate recipe title",
            "request_id": "1f0c2a9b"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
