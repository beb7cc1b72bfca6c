"""
Guestbook Backend: Guestbook Route Handlers
===========================================

What:  The guestbook page and the endpoints that add and remove entries.

    GET    /                          → redirect to /guestbook
    GET    /guestbook                 → list + form             (anyone)
    POST   /guestbook                 → add entry               (signed in)
    POST   /guestbook/{id}/delete     → remove entry, redirect  (ADMIN)
    DELETE /guestbook/{id}            → remove entry, 204       (ADMIN)
"""

import logging

from fastapi import APIRouter, Depends, Form, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from guestbook.database import get_db_session
from guestbook.exceptions import ValidationError
from guestbook.repositories.entry_repository import GuestbookRepository
from guestbook.security.method import require_authenticated, require_role
from guestbook.services.entry_service import entry_service
from guestbook.templating import render

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Guestbook"])


async def get_entry_repository(
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> GuestbookRepository:
    # scope="function": the session commits when the handler returns, before
    # the redirect or 204 is sent
    return GuestbookRepository(db)


@router.get("/", include_in_schema=False)
async def index() -> RedirectResponse:
    return RedirectResponse("/guestbook", status_code=302)


@router.get("/guestbook", summary="Show the guestbook")
async def show_guestbook(
    request: Request,
    repository: GuestbookRepository = Depends(get_entry_repository, scope="function"),
) -> Response:
    entries = await entry_service.list_entries(repository)
    return render(request, "guestbook", {"entries": entries, "form": {}, "errors": {}})


@router.post(
    "/guestbook",
    summary="Add an entry",
    dependencies=[Depends(require_authenticated)],
)
async def add_entry(
    request: Request,
    name: str = Form(default=""),
    text: str = Form(default=""),
    repository: GuestbookRepository = Depends(get_entry_repository, scope="function"),
) -> Response:
    """
    Validate and store a new entry.

    Invalid input re-renders the page with the submitted values and one
    message per field (HTTP 400). Success redirects back to the list
    (303, so a browser refresh does not repost).
    """
    try:
        form = entry_service.validate_form({"name": name, "text": text})
    except ValidationError as e:
        entries = await entry_service.list_entries(repository)
        return render(
            request,
            "guestbook",
            {
                "entries": entries,
                "form": {"name": name, "text": text},
                "errors": e.errors,
                "message": e.message,
            },
            status_code=400,
        )

    await entry_service.add_entry(repository, form)
    return RedirectResponse("/guestbook", status_code=303)


@router.post(
    "/guestbook/{entry_id}/delete",
    summary="Remove an entry (form post)",
    dependencies=[Depends(require_role("ADMIN"))],
)
async def remove_entry_form(
    entry_id: int,
    repository: GuestbookRepository = Depends(get_entry_repository, scope="function"),
) -> RedirectResponse:
    await entry_service.remove_entry(repository, entry_id)
    return RedirectResponse("/guestbook", status_code=303)


@router.delete(
    "/guestbook/{entry_id}",
    status_code=204,
    summary="Remove an entry",
    dependencies=[Depends(require_role("ADMIN"))],
)
async def remove_entry(
    entry_id: int,
    repository: GuestbookRepository = Depends(get_entry_repository, scope="function"),
) -> Response:
    await entry_service.remove_entry(repository, entry_id)
    return Response(status_code=204)
