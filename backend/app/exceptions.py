"""
Linkhub Backend: Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the identity dependency and middleware; caught by
       global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    LinkhubError (base)
    ├── ValidationError          → 400 Bad Request (empty required field)
    ├── InvalidOperationError    → 400 Bad Request (self-targeted action)
    ├── AlreadyExistsError       → 400 Bad Request (duplicate follow / email)
    ├── NotFollowingError        → 400 Bad Request (unfollow a non-connection)
    ├── AuthenticationError      → 401 Unauthorized (no caller identity)
    ├── ForbiddenError           → 403 Forbidden (outside the caller's network)
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error

None of these are retried anywhere; they surface to the caller as-is.
"""

from typing import Any, Dict, Optional


class LinkhubError(Exception):
    """
    Base exception for all Linkhub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(LinkhubError):
    """
    Raised when client input fails a business validation rule.

    When:    Empty post content, empty comment text, empty message body,
             blank name or email.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Comment text is required",
            "details": {"field": "text"}
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


class InvalidOperationError(LinkhubError):
    """
    Raised when a user targets themselves with an action that forbids it.

    When:    POST /api/connections/{own id}/follow.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "This operation is not allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AlreadyExistsError(LinkhubError):
    """
    Raised when creating something that already exists.

    When:    Following a user twice; registering an email already in use.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFollowingError(LinkhubError):
    """
    Raised when unfollowing a user who is not in the caller's connections.

    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Not following this user",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(LinkhubError):
    """
    Raised when the request carries no usable caller identity.

    When:    Identity header missing or not a UUID.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(LinkhubError):
    """
    Raised when the caller is not allowed to act on the target.

    When:    Sending a message to someone outside the caller's connections.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(LinkhubError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown user, post, message or notification id; also editing or
             deleting a post the caller does not own (ownership is not leaked).
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; the service layer converts
    that None into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class DatabaseError(LinkhubError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, deadlock, or a
             connection list that cannot be loaded while computing network stats.
    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(LinkhubError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests

    Response includes:
        - retry_after: Seconds until the rate limit window resets
        - Retry-After header for HTTP-compliant clients
    """

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
