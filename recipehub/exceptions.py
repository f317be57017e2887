"""
RecipeHub Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure the domain layer
       can detect.
How:   Each exception carries a user-facing message and an optional context
       dict. Global exception handlers (registered in main.py) turn them
       into structured JSON error responses with the right status code.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    RecipeHubError (base)
    ├── ValidationError          → 400 Bad Request
    ├── ReferenceMismatchError   → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    │   ├── AlreadyLikedError
    │   ├── NotYetLikedError
    │   ├── AlreadyMemberError
    │   └── NotMemberError
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class RecipeHubError(Exception):
    """
    Base exception for all RecipeHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
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
    Raised when client input fails a business-rule check that schema
    validation cannot express (e.g. a missing upload, an unsupported image).

    Example response:
        {
            "error": "validation_error",
            "message": "No file uploaded",
            "details": {"field": "image"}
        }
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


class NotFoundError(RecipeHubError):
    """
    Raised when an identifier does not resolve to a stored entity.

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ReferenceMismatchError(RecipeHubError):
    """
    Raised when two identifiers each resolve but do not belong together,
    e.g. a comment id addressed under a recipe it is not attached to.
    """

    def __init__(
        self,
        message: str = "Comment does not belong to this recipe",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(RecipeHubError):
    """Raised when the bearer credential is missing, malformed, expired or invalid."""

    def __init__(
        self,
        message: str = "No valid token, authorization denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(RecipeHubError):
    """
    Raised when an authenticated user attempts to mutate (or view) an entity
    they do not own. Never downgraded to a silent no-op.
    """

    def __init__(
        self,
        message: str = "User not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(RecipeHubError):
    """
    Base for toggle/membership requests that conflict with current state.

    `code` is the machine-readable error code returned to the client.
    Repeating a rejected request is always safe: it fails the same way and
    changes nothing.
    """

    code = "conflict"

    def __init__(
        self,
        message: str = "Request conflicts with the current state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AlreadyLikedError(ConflictError):
    code = "already_liked"

    def __init__(self, resource: str = "recipe", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=f"{resource.capitalize()} already liked", context=context)


class NotYetLikedError(ConflictError):
    code = "not_yet_liked"

    def __init__(self, resource: str = "recipe", context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"{resource.capitalize()} has not yet been liked", context=context
        )


class AlreadyMemberError(ConflictError):
    code = "already_member"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Recipe already in folder", context=context)


class NotMemberError(ConflictError):
    code = "not_member"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Recipe not in folder", context=context)


class FileStorageError(RecipeHubError):
    """
    Raised when writing an uploaded image to disk fails.

    The client gets a generic message; the OS error is logged.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(RecipeHubError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; query details are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(RecipeHubError):
    """Raised when a client exceeds the per-IP request rate limit."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
