"""
Guestbook Backend: Login & Logout
=================================

    GET       /login   → "login" view, whatever the session state
    POST      /login   → form login (username, password)
                          success → saved request or "/"
                          failure → /login?error
    GET|POST  /logout  → clear the session, redirect to "/"

Credential checking is delegated to the AuthenticationManager on app.state.
"""

import logging

from fastapi import APIRouter, Form, Request, Response
from fastapi.responses import RedirectResponse

from guestbook.security.principal import sign_in, sign_out
from guestbook.security.users import AuthenticationManager
from guestbook.templating import render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

LOGOUT_SUCCESS_URL = "/"


@router.get("/login", summary="Login view")
async def login_view(request: Request) -> Response:
    return render(
        request,
        "login",
        {"error": "error" in request.query_params},
    )


@router.post("/login", summary="Form login")
async def login(
    request: Request,
    username: str = Form(default=""),
    password: str = Form(default=""),
) -> RedirectResponse:
    manager: AuthenticationManager = request.app.state.authentication_manager
    principal = manager.authenticate(username, password)
    if principal is None:
        return RedirectResponse("/login?error", status_code=302)

    target = sign_in(request, principal)
    return RedirectResponse(target, status_code=302)


# No CSRF token is required, so GET is accepted as well as POST
@router.api_route("/logout", methods=["GET", "POST"], summary="Logout")
async def logout(request: Request) -> RedirectResponse:
    if request.user.is_authenticated:
        logger.info("User '%s' signed out", request.user.display_name)
    sign_out(request)
    return RedirectResponse(LOGOUT_SUCCESS_URL, status_code=302)
