"""
Guestbook Backend: Entry Service
================================

What:  Business rules for listing, adding and removing guestbook entries.
How:   Stateless; every call receives the repository it should work on.
       SQLAlchemy failures are wrapped into DatabaseError so the route layer
       never sees driver exceptions.
Who:   Called by the guestbook route handlers.

Error Handling Strategy:
    - Invalid form input      → ValidationError (field → message map)
    - Unknown entry id        → NotFoundError
    - Anything SQLAlchemy     → DatabaseError (details logged, not rendered)
"""

import logging
from typing import List, Mapping

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from guestbook.exceptions import DatabaseError, NotFoundError, ValidationError
from guestbook.models.entry import GuestbookEntry
from guestbook.repositories.entry_repository import GuestbookRepository
from guestbook.schemas.entry import EntryView, GuestbookForm

logger = logging.getLogger(__name__)


class EntryService:
    """Business logic layer for guestbook entries."""

    @staticmethod
    def validate_form(data: Mapping[str, object]) -> GuestbookForm:
        """
        Validate a submitted form.

        Raises:
            ValidationError: with one message per offending field
        """
        try:
            return GuestbookForm.model_validate(
                {"name": data.get("name") or "", "text": data.get("text") or ""}
            )
        except PydanticValidationError as e:
            errors = {}
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "form"
                # Custom validators surface as "Value error, <msg>"
                errors.setdefault(field, err["msg"].removeprefix("Value error, "))
            raise ValidationError(
                message="The entry could not be saved",
                errors=errors,
                context={"fields": sorted(errors)},
            )

    async def list_entries(self, repository: GuestbookRepository) -> List[EntryView]:
        """All entries, oldest first, as view models."""
        try:
            entries = await repository.find_all()
        except SQLAlchemyError as e:
            logger.error("Database error listing entries: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not load the guestbook. Please try again.",
                context={"error_type": type(e).__name__},
            )
        return [EntryView.model_validate(entry) for entry in entries]

    async def add_entry(
        self,
        repository: GuestbookRepository,
        form: GuestbookForm,
    ) -> EntryView:
        """Persist a validated form as a new entry."""
        try:
            entry = await repository.save(GuestbookEntry(form.name, form.text))
        except SQLAlchemyError as e:
            logger.error("Database error saving entry: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Your entry could not be saved. Please try again.",
                context={"error_type": type(e).__name__},
            )
        logger.info("Entry %s added by %s", entry.id, entry.name)
        return EntryView.model_validate(entry)

    async def remove_entry(self, repository: GuestbookRepository, entry_id: int) -> None:
        """
        Delete an entry by id.

        Raises:
            NotFoundError: no entry with that id
        """
        try:
            entry = await repository.find_by_id(entry_id)
            if entry is None:
                raise NotFoundError(resource="entry", resource_id=str(entry_id))
            await repository.delete(entry)
        except SQLAlchemyError as e:
            logger.error("Database error deleting entry %s: %s", entry_id, str(e))
            raise DatabaseError(
                message="The entry could not be removed. Please try again.",
                context={"entry_id": entry_id},
            )
        logger.info("Entry %s removed", entry_id)


entry_service = EntryService()
