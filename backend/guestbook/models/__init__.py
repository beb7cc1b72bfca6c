# Models package init
"""ORM models. Importing this package registers every table with Base.metadata."""

from guestbook.models.entry import GuestbookEntry

__all__ = ["GuestbookEntry"]
