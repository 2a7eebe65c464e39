"""
RecipeHub Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every error the API reports.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the access policy and the auth dependency.

Exception Hierarchy:
    RecipeHubError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized (no valid principal)
    ├── ForbiddenError           → 403 Forbidden (principal lacks role/ownership)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict (uniqueness or state violation)
    │   └── DuplicateReviewError → 400 Bad Request
    └── ServerError              → 500 Internal Server Error (details never returned)
"""

from typing import Any, Dict, Optional


class RecipeHubError(Exception):
    """
    Base exception for all RecipeHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where the handler allows)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RecipeHubError):
    """
    Raised when client input fails a business rule.

    When:    Missing required fields, rating out of range, unknown decision,
             deleting a user that still owns recipes.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types, malformed UUIDs) are raised by
    FastAPI as RequestValidationError and mapped to the same 400 response.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(RecipeHubError):
    """No credential was presented, or the credentials did not match an account."""

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(RecipeHubError):
    """
    A principal exists but may not perform the action.

    When:    Invalid or expired bearer token, missing role, acting on a review
             or role request owned by someone else.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Forbidden",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(RecipeHubError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that None
    into this exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(RecipeHubError):
    """
    The request collides with existing state.

    When:    Duplicate recipe title or username (case-insensitive), a second
             pending role request, requesting Writer while already holding it,
             or moving a closed role request to a different state.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "Conflict",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateReviewError(ConflictError):
    """
    The author already reviewed this recipe.

    A conflict by nature, but clients have always received 400 for it, so it
    has its own handler.
    """

    def __init__(
        self,
        message: str = "Recipe already reviewed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServerError(RecipeHubError):
    """
    Raised when a collaborator (database, hashing) fails unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A server error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
