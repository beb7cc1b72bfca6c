"""
Guestbook Backend: Demo Data Seeding
====================================

What:  Fills the guestbook with four fixed entries on startup.
How:   `seed_entries` constructs the entries and saves them one by one, in
       order, through whatever store it is given. `seed_demo_entries` is the
       startup hook that opens a session and commits.

Note:
    There is no existence check. Every startup appends four more rows, so a
    persistent database collects duplicates across restarts. Disable with
    SEED_DEMO_DATA=false.
"""

import logging
from typing import Tuple

from guestbook.database import Database
from guestbook.models.entry import GuestbookEntry
from guestbook.repositories.entry_repository import EntryStore, GuestbookRepository

logger = logging.getLogger(__name__)

DEMO_ENTRIES: Tuple[Tuple[str, str], ...] = (
    ("H4xx0r", "first!!!"),
    ("Arni", "Hasta la vista, baby"),
    ("Duke Nukem", "It's time to kick ass and chew bubble gum. And I'm all out of gum."),
    (
        "Gump1337",
        "Mama always said life was like a box of chocolates. You never know what you're gonna get.",
    ),
)


async def seed_entries(store: EntryStore) -> None:
    """Save the demo entries in order. A failing save propagates."""
    for name, text in DEMO_ENTRIES:
        await store.save(GuestbookEntry(name, text))


async def seed_demo_entries(database: Database) -> str:
    """Startup hook: seed inside one transaction."""
    async with database.session() as session:
        await seed_entries(GuestbookRepository(session))
    logger.info("Seeded %d demo entries", len(DEMO_ENTRIES))
    return f"{len(DEMO_ENTRIES)} entries"
