"""
Guestbook Backend: Entry Repository
===================================

What:  Persistence operations for GuestbookEntry over one AsyncSession.
Who:   EntryService (request handlers) and the seed runner.

The seed runner only needs something with `save(entry)`; request handlers
use the fuller surface. `EntryStore` names the minimal write contract.
"""

import logging
from typing import List, Optional, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guestbook.models.entry import GuestbookEntry

logger = logging.getLogger(__name__)


class EntryStore(Protocol):
    """Anything that can persist a new guestbook entry."""

    async def save(self, entry: GuestbookEntry) -> GuestbookEntry: ...

    async def append(self, entry: GuestbookEntry) -> int: ...


class GuestbookRepository:
    """SQLAlchemy-backed store of guestbook entries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, entry: GuestbookEntry) -> GuestbookEntry:
        """Add the entry and flush so the database assigns its id."""
        self.session.add(entry)
        await self.session.flush()
        logger.debug("Saved guestbook entry %s by %s", entry.id, entry.name)
        return entry

    async def append(self, entry: GuestbookEntry) -> int:
        saved = await self.save(entry)
        return saved.id

    async def find_all(self) -> List[GuestbookEntry]:
        """All entries in creation order (oldest first)."""
        result = await self.session.execute(
            select(GuestbookEntry).order_by(GuestbookEntry.id)
        )
        return list(result.scalars().all())

    async def find_by_id(self, entry_id: int) -> Optional[GuestbookEntry]:
        result = await self.session.execute(
            select(GuestbookEntry).where(GuestbookEntry.id == entry_id)
        )
        return result.scalar_one_or_none()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count(GuestbookEntry.id)))
        return result.scalar() or 0

    async def delete(self, entry: GuestbookEntry) -> None:
        await self.session.delete(entry)
        await self.session.flush()
