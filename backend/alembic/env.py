"""
Alembic Migration Environment
=============================

What:  Runs migrations for the guestbook schema.
How:   Online migrations reuse the application's own `Database` engine, so
       alembic and the app always agree on URL and driver. Offline mode
       renders SQL for the configured URL without connecting.
Who:   `alembic upgrade head`, `alembic revision --autogenerate`, ...

`Database.create_schema()` is enough for SQLite demos; these migrations
are for databases that outlive the process.
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from guestbook.config import settings
from guestbook.database import Base, Database
from guestbook.models import GuestbookEntry  # noqa: F401  (registers the table)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# SQLite cannot ALTER most constraints in place
BATCH = settings.is_sqlite


def run_migrations_offline() -> None:
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=BATCH,
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=BATCH,
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    database = Database(settings)
    try:
        async with database.engine.connect() as connection:
            await connection.run_sync(_migrate)
            await connection.commit()
    finally:
        await database.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
