"""
Guestbook Backend: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds every collaborator from settings (database, user
       store, security policy, startup hooks), attaches them to app.state,
       and returns the app. Nothing is discovered implicitly.
Who:   uvicorn (`guestbook.main:app`), the `guestbook` console script, tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                    FastAPI App                           │
    │                                                          │
    │  Middleware Chain (outermost first):                     │
    │  Request ID → Logging → Session → Authentication         │
    │             → Authorization (permit-all)                 │
    │                                                          │
    │  Routes:                                                 │
    │  /guestbook (GET, POST)   /guestbook/{id} (DELETE)       │
    │  /login (GET, POST)       /logout (GET, POST)   /health  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Login→302 /login │ Denied→403     │ NotFound→404      │
    │  Database→500      │ Unexpected→500                      │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Run startup hooks in order: create_schema, seed_demo_entries
       (a failing hook aborts startup)
    3. Log the generated password, if one was generated

    Shutdown:
    1. Dispose database engine
"""

import logging
import secrets
import sys
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware import Middleware
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.sessions import SessionMiddleware

from guestbook import __version__
from guestbook.bootstrap import StartupHooks, run_startup_hooks
from guestbook.config import Settings, settings as default_settings
from guestbook.database import Database
from guestbook.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    DatabaseError,
    GuestbookError,
    NotFoundError,
)
from guestbook.middleware.logging import RequestLoggingMiddleware
from guestbook.middleware.request_id import RequestIDMiddleware, request_id_var
from guestbook.routes import auth, guestbook, health
from guestbook.security.policy import AuthorizationMiddleware, SecurityPolicy
from guestbook.security.principal import SessionAuthBackend, save_request
from guestbook.security.users import AuthenticationManager, build_user_store
from guestbook.services.seed_service import seed_demo_entries
from guestbook.templating import render_error

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once, before any startup hook runs."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Startup Hooks
# ══════════════════════════════════════════════════════════════════════════

def build_startup_hooks(settings: Settings, database: Database) -> StartupHooks:
    """The ordered list of initialization steps run by the lifespan."""
    hooks = StartupHooks()
    if settings.create_schema:
        hooks.register("create_schema", database.create_schema)
    if settings.seed_demo_data:
        hooks.register("seed_demo_entries", partial(seed_demo_entries, database))
    return hooks


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Guestbook %s starting up...", __version__)

    try:
        app.state.startup_results = await run_startup_hooks(app.state.startup_hooks)
    except GuestbookError:
        await database.dispose()
        raise

    generated = app.state.authentication_manager.user_store.generated_password
    if generated:
        logger.warning(
            "Using generated password for user '%s': %s", settings.user_name, generated
        )
    if not settings.secret_key:
        logger.warning("SECRET_KEY is not set; sessions will not survive a restart")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Guestbook shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to views.

    Handler hierarchy:
        AuthenticationRequiredError  → 302 /login (requested path saved)
        AccessDeniedError            → 403 error view
        NotFoundError                → 404 error view
        DatabaseError                → 500 error view, generic message
        GuestbookError (base)        → 500 error view
        HTTPException                → error view with its status
        Exception (fallback)         → 500 error view, stack trace logged
    """

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_authentication_required(request: Request, exc: AuthenticationRequiredError):
        save_request(request)
        return RedirectResponse("/login", status_code=302)

    @app.exception_handler(AccessDeniedError)
    async def handle_access_denied(request: Request, exc: AccessDeniedError):
        rid = request_id_var.get("")
        logger.warning("[%s] Access denied: %s", rid, exc.context)
        return render_error(request, 403, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return render_error(request, 404, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return render_error(request, 500, "An internal error occurred. Please try again later.")

    @app.exception_handler(GuestbookError)
    async def handle_guestbook_error(request: Request, exc: GuestbookError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return render_error(request, 500, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        response = render_error(request, exc.status_code, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return render_error(request, 500, "An unexpected error occurred. Please try again.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def build_middleware(settings: Settings, policy: SecurityPolicy) -> List[Middleware]:
    """The request-processing chain, outermost first."""
    secret_key = settings.secret_key
    if not secret_key:
        # A per-process key; the lifespan warns about it
        secret_key = secrets.token_urlsafe(32)

    return [
        Middleware(RequestIDMiddleware),
        Middleware(RequestLoggingMiddleware),
        Middleware(
            SessionMiddleware,
            secret_key=secret_key,
            session_cookie=settings.session_cookie,
            max_age=settings.session_max_age,
            same_site="lax",
        ),
        Middleware(AuthenticationMiddleware, backend=SessionAuthBackend()),
        Middleware(AuthorizationMiddleware, policy=policy),
    ]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: configuration to use; the module-level settings by default

    Returns:
        A configured app. Startup hooks run when its lifespan starts.
    """
    settings = settings or default_settings
    database = Database(settings)
    policy = SecurityPolicy.permit_all()

    app = FastAPI(
        title="Guestbook",
        description="A small guestbook with form login.",
        version=__version__,
        lifespan=lifespan,
        middleware=build_middleware(settings, policy),
    )

    app.state.settings = settings
    app.state.database = database
    app.state.authentication_manager = AuthenticationManager(build_user_store(settings))
    app.state.startup_hooks = build_startup_hooks(settings, database)
    app.state.startup_results = []

    register_exception_handlers(app)

    app.include_router(guestbook.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entrypoint: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "guestbook.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )


# uvicorn expects `guestbook.main:app` to be importable
app = create_app()
