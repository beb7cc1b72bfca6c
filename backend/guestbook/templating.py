"""
Guestbook Backend: Server-Side Views
====================================

Jinja2 templates live in guestbook/templates (autoescaped). View names match
template basenames: "guestbook", "login", "error".
"""

from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.templating import Jinja2Templates
from starlette.requests import Request
from starlette.responses import Response

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

ERROR_TITLES = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Server Error",
}


def render(
    request: Request,
    view: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> Response:
    """Render the named view with the current user in the context."""
    ctx: Dict[str, Any] = {"user": request.scope.get("user")}
    ctx.update(context or {})
    return templates.TemplateResponse(request, f"{view}.html", ctx, status_code=status_code)


def render_error(request: Request, status_code: int, message: str) -> Response:
    """
    Render the error view.

    Also sets X-Request-ID: the catch-all 500 handler runs outside
    RequestIDMiddleware, which would otherwise add it.
    """
    request_id = getattr(request.state, "request_id", "")
    response = render(
        request,
        "error",
        {
            "status_code": status_code,
            "title": ERROR_TITLES.get(status_code, "Error"),
            "message": message,
            "request_id": request_id,
        },
        status_code=status_code,
    )
    if request_id:
        response.headers["X-Request-ID"] = request_id
    return response
