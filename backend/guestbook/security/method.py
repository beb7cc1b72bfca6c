"""
Guestbook Backend: Method-Level Security
========================================

Per-endpoint requirements, declared as FastAPI dependencies:

    @router.post("/guestbook", dependencies=[Depends(require_authenticated)])
    @router.delete("/guestbook/{id}", dependencies=[Depends(require_role("ADMIN"))])

Both are no-ops when METHOD_SECURITY_ENABLED is false.
"""

from typing import Callable

from fastapi import Request

from guestbook.exceptions import AccessDeniedError, AuthenticationRequiredError


def _enabled(request: Request) -> bool:
    return request.app.state.settings.method_security_enabled


async def require_authenticated(request: Request) -> None:
    """Anonymous callers are sent to the login view."""
    if _enabled(request) and not request.user.is_authenticated:
        raise AuthenticationRequiredError(context={"path": request.url.path})


def require_role(role: str) -> Callable:
    """Dependency factory: the caller must be signed in and hold `role`."""
    role = role.upper()

    async def dependency(request: Request) -> None:
        if not _enabled(request):
            return
        if not request.user.is_authenticated:
            raise AuthenticationRequiredError(context={"path": request.url.path})
        if not request.user.has_role(role):
            raise AccessDeniedError(
                required_role=role,
                context={"path": request.url.path, "user": request.user.username},
            )

    dependency.__name__ = f"require_role_{role.lower()}"
    return dependency
