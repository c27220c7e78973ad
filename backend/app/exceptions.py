"""
Ulyngo Backend — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-facing message, an optional `details`
       string that IS returned to the client (e.g. the raw upstream error for
       diagnosability), and a `context` dict that is only logged.
       The global handler registered in main.py turns any UlyngoError into
       `{"error", "code", "details", "request_id"}` with `status_code`.
Who:   Raised by services, clients and dependencies; caught by global handlers.

Exception Hierarchy:
    UlyngoError (base)                       → 500
    ├── BadRequestError                      → 400
    ├── AuthenticationError                  → 401
    ├── PermissionDeniedError                → 403
    ├── NotFoundError                        → 404
    ├── ConflictError                        → 409
    ├── RateLimitExceededError               → 429
    ├── ConfigurationError                   → 500
    ├── DatabaseError                        → 500
    ├── TripPlanningError                    → 500
    └── UpstreamError                        → 502
        ├── NoRouteFoundError                → 502
        └── ParseError                       → 502
"""

from typing import Any, Dict, Optional


class UlyngoError(Exception):
    """
    Base exception for all Ulyngo application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        details:  Optional extra string returned to the client
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details
        self.context = context or {}
        super().__init__(self.message)


class BadRequestError(UlyngoError):
    """
    Raised when caller input fails validation or yields nothing usable.

    When: Unknown category/tag ids on a marker, a planning query that
          produces no destination.
    """

    status_code = 400
    code = "bad_request"

    def __init__(
        self,
        message: str = "Invalid request",
        field: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, details=details, context=ctx)
        self.field = field


class AuthenticationError(UlyngoError):
    """Missing, malformed, invalid or expired credentials."""

    status_code = 401
    code = "unauthorized"

    def __init__(self, message: str = "Invalid credentials", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class PermissionDeniedError(UlyngoError):
    """Authenticated, but the caller's role does not allow the operation."""

    status_code = 403
    code = "forbidden"

    def __init__(
        self,
        message: str = "Access denied. Administrator privileges are required.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(UlyngoError):
    """
    Raised when a requested resource does not exist (or is soft-deleted).

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so routes never deal with None.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
            if resource_id:
                message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(UlyngoError):
    """A unique constraint would be violated (username, category name, ...)."""

    status_code = 409
    code = "conflict"


class RateLimitExceededError(UlyngoError):
    """
    Raised when a client exceeds the per-client request rate limit.

    The handler adds a Retry-After header from `retry_after`.
    """

    status_code = 429
    code = "rate_limit_exceeded"

    def __init__(self, retry_after: int = 60, context: Optional[Dict[str, Any]] = None):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class ConfigurationError(UlyngoError):
    """
    A required environment value or credential is missing.

    Fatal to the request, never to the process: the server keeps running
    and every request that needs the value fails with this error.
    """

    status_code = 500
    code = "configuration_error"


class DatabaseError(UlyngoError):
    """
    Raised when database operations fail unexpectedly.

    The client only ever sees the generic message; constraint names and SQL
    stay in the server log via `context`.
    """

    status_code = 500
    code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TripPlanningError(UlyngoError):
    """
    The trip-planning pipeline aborted in a stage it cannot continue without
    (intent extraction or the main route). `details` carries the underlying
    upstream error text.
    """

    status_code = 500
    code = "trip_planning_failed"


class UpstreamError(UlyngoError):
    """
    Non-success status or transport failure from an external API.

    Attributes:
        upstream_status: HTTP status code or API status string, when known
        body:            Raw response body, when available
    """

    status_code = 502
    code = "upstream_error"

    def __init__(
        self,
        message: str = "An external service request failed",
        upstream_status: Any = None,
        body: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if upstream_status is not None:
            ctx["upstream_status"] = upstream_status
        super().__init__(message=message, details=body, context=ctx)
        self.upstream_status = upstream_status
        self.body = body


class NoRouteFoundError(UpstreamError):
    """Directions API answered with a non-OK status or without any route legs."""

    code = "no_route_found"

    def __init__(
        self,
        upstream_status: str = "",
        error_message: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Directions API returned status '{upstream_status}'"
        if error_message:
            message = f"{message}: {error_message}"
        super().__init__(
            message=message,
            upstream_status=upstream_status,
            body=error_message or None,
            context=context,
        )


class ParseError(UpstreamError):
    """An upstream response body did not match the expected structure."""

    code = "upstream_parse_error"
