"""
Guestbook Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock AsyncSession (no real DB needed)
    ├── test_settings:   Settings pointing at a fresh SQLite file
    ├── database:        Database with the schema created (async tests)
    ├── client:          TestClient for a fresh app (lifespan runs)
    └── admin_client:    Same, with the configured user holding ADMIN
"""

import asyncio
import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Override settings for testing BEFORE any guestbook imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="guestbook_test_"), "import.db"
)
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from guestbook.config import Settings
from guestbook.database import Database
from guestbook.main import create_app
from guestbook.repositories.entry_repository import GuestbookRepository

TEST_USER = "user"
TEST_PASSWORD = "password"


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'guestbook.db'}",
        "secret_key": "test-secret-key",
        "user_name": TEST_USER,
        "user_password": TEST_PASSWORD,
        "user_roles": "USER",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


def fetch_entries(settings: Settings):
    """Read every stored entry as (name, text) pairs, outside any app."""

    async def _fetch():
        database = Database(settings)
        try:
            async with database.session() as session:
                entries = await GuestbookRepository(session).find_all()
                return [(e.name, e.text) for e in entries]
        finally:
            await database.dispose()

    return asyncio.run(_fetch())


def login(client: TestClient, username: str = TEST_USER, password: str = TEST_PASSWORD):
    return client.post(
        "/login",
        data={"username": username, "password": password},
        follow_redirects=False,
    )


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = entry
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings(tmp_path):
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def database(test_settings):
    """A real SQLite database with the schema created and no rows."""
    db = Database(test_settings)
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def client(test_settings):
    """
    TestClient for a fresh app. Entering the client runs the lifespan, so
    the schema exists and the demo entries are seeded.
    """
    with TestClient(create_app(test_settings)) as c:
        yield c


@pytest.fixture
def admin_client(tmp_path):
    settings = make_settings(tmp_path, user_name="admin", user_password="admin", user_roles="USER,ADMIN")
    with TestClient(create_app(settings)) as c:
        yield c
