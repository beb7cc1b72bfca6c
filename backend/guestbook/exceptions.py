"""
Guestbook Backend: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the error scenarios of the app.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) translate them into
       HTML error views, redirects, or status codes.
Who:   Raised by services, security dependencies and the startup runner.

Exception Hierarchy:
    GuestbookError (base)
    ├── ValidationError               → 400 Bad Request (form re-rendered)
    ├── NotFoundError                 → 404 Not Found
    ├── AuthenticationRequiredError   → 302 redirect to /login
    ├── AccessDeniedError             → 403 Forbidden
    ├── DatabaseError                 → 500 Internal Server Error
    └── StartupError                  → process aborts (raised from lifespan)
"""

from typing import Any, Dict, List, Optional


class GuestbookError(Exception):
    """
    Base exception for all Guestbook application errors.

    Attributes:
        message:  User-facing error description (safe to render)
        context:  Additional debug info (logged, never rendered)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GuestbookError):
    """
    Raised when submitted form data fails validation.

    `errors` maps field name → message, so the view can show each problem
    next to its input.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or ({field: message} if field else {})


class NotFoundError(GuestbookError):
    """Raised when a requested resource does not exist."""

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


class AuthenticationRequiredError(GuestbookError):
    """
    Raised when an anonymous visitor calls an endpoint that needs a login.

    The handler remembers the requested path in the session and redirects
    to the login view; after a successful login the visitor is sent back.
    """

    def __init__(
        self,
        message: str = "Please sign in to continue",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AccessDeniedError(GuestbookError):
    """Raised when a signed-in user lacks the role an endpoint requires."""

    def __init__(
        self,
        required_role: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = "You are not allowed to do that"
        ctx = context or {}
        if required_role:
            ctx["required_role"] = required_role
        super().__init__(message=message, context=ctx)
        self.required_role = required_role


class DatabaseError(GuestbookError):
    """
    Raised when database operations fail unexpectedly.

    The rendered message is always generic; SQL details are logged only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StartupError(GuestbookError):
    """
    Raised by the startup runner when a hook fails.

    Propagates out of the lifespan, so the server never starts accepting
    requests and uvicorn exits with a non-zero status.
    """

    def __init__(
        self,
        hook: str,
        results: Optional[List[Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        message = f"Startup hook '{hook}' failed"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message=message, context={"hook": hook})
        self.hook = hook
        self.results = results or []
        self.cause = cause
