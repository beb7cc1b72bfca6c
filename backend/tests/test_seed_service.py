"""
Guestbook Backend: Seed Runner Tests
====================================

What we test:
    ✅ The four demo entries are saved in the listed order
    ✅ A failing save stops seeding and propagates
    ✅ Seeding twice against the same database duplicates the rows
"""

import pytest
from unittest.mock import AsyncMock

from guestbook.models.entry import GuestbookEntry
from guestbook.repositories.entry_repository import GuestbookRepository
from guestbook.services.seed_service import DEMO_ENTRIES, seed_demo_entries, seed_entries

EXPECTED = [
    ("H4xx0r", "first!!!"),
    ("Arni", "Hasta la vista, baby"),
    ("Duke Nukem", "It's time to kick ass and chew bubble gum. And I'm all out of gum."),
    (
        "Gump1337",
        "Mama always said life was like a box of chocolates. You never know what you're gonna get.",
    ),
]


def test_demo_entries_are_the_fixed_literals():
    assert list(DEMO_ENTRIES) == EXPECTED


class TestSeedEntries:
    """seed_entries against a stub store."""

    @pytest.mark.asyncio
    async def test_saves_each_entry_in_order(self):
        store = AsyncMock()
        store.save = AsyncMock(side_effect=lambda entry: entry)

        await seed_entries(store)

        saved = [call.args[0] for call in store.save.await_args_list]
        assert [(e.name, e.text) for e in saved] == EXPECTED
        assert all(e.created_at is not None for e in saved)

    @pytest.mark.asyncio
    async def test_failing_save_propagates(self):
        store = AsyncMock()
        store.save = AsyncMock(side_effect=[None, RuntimeError("disk full")])

        with pytest.raises(RuntimeError, match="disk full"):
            await seed_entries(store)

        assert store.save.await_count == 2


class TestSeedDemoEntries:
    """The startup hook against a real SQLite database."""

    @pytest.mark.asyncio
    async def test_fresh_database_holds_exactly_the_demo_entries(self, database):
        await seed_demo_entries(database)

        async with database.session() as session:
            entries = await GuestbookRepository(session).find_all()

        assert [(e.name, e.text) for e in entries] == EXPECTED
        assert [e.id for e in entries] == sorted(e.id for e in entries)

    @pytest.mark.asyncio
    async def test_seeding_again_appends_duplicates(self, database):
        # No existence check: each run adds four more rows
        await seed_demo_entries(database)
        await seed_demo_entries(database)

        async with database.session() as session:
            repo = GuestbookRepository(session)
            assert await repo.count() == 8
            entries = await repo.find_all()

        assert [(e.name, e.text) for e in entries] == EXPECTED + EXPECTED


class TestGuestbookRepository:
    """The store contract the seed runner and handlers share."""

    @pytest.mark.asyncio
    async def test_append_returns_increasing_ids(self, database):
        async with database.session() as session:
            repo = GuestbookRepository(session)
            first = await repo.append(GuestbookEntry("Arni", "I'll be back"))
            second = await repo.append(GuestbookEntry("Duke Nukem", "Groovy"))

        assert second > first

        async with database.session() as session:
            repo = GuestbookRepository(session)
            found = await repo.find_by_id(first)
            assert (found.name, found.text) == ("Arni", "I'll be back")
            assert await repo.find_by_id(999) is None
