"""
Guestbook Backend: Request Logging Middleware
=============================================

What:  One access-log line per request:

    POST /guestbook 303 12.4ms user=admin [a1b2c3d4] from 127.0.0.1

How:   Level follows the status code (5xx ERROR, 4xx WARNING, else INFO).
       Request bodies are never logged; the login form carries passwords.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from guestbook.middleware.request_id import request_id_var

logger = logging.getLogger("guestbook.access")

# Probes hit these every few seconds
QUIET_PATHS = {"/health"}


def level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def _username(request: Request) -> str:
    # request.user is only set once AuthenticationMiddleware has run, which
    # sits inside this layer; read it after the response.
    user = request.scope.get("user")
    if user is not None and user.is_authenticated:
        return user.display_name
    return "-"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        client = request.client.host if request.client else "unknown"
        username = _username(request)
        rid = request_id_var.get("")

        logger.log(
            level_for(response.status_code),
            "%s %s %d %.1fms user=%s [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            username,
            rid,
            client,
            extra={
                "request_id": rid,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
                "username": username,
            },
        )
        return response
