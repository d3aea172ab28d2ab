"""
Alembic Migration Environment
===============================

What:  Runs the document-table migrations for parcel_api.
How:   The URL comes from DATABASE_URL (parcel_api settings), or from
       `alembic -x db_url=...` for a one-off target. Online runs open an
       async engine and hand a sync connection to Alembic via run_sync().

SQLite targets (the test database) are migrated in batch mode, since
SQLite cannot ALTER most column properties in place.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from parcel_api.config import settings
from parcel_api.database import Base
from parcel_api.models import documents  # noqa: F401

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def get_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("db_url") or settings.database_url


def _configure(url: str, /, **kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        **kwargs,
    )


def migrate_offline(url: str) -> None:
    """Print the migration SQL instead of applying it."""
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def _migrate_on(connection: Connection, url: str) -> None:
    _configure(url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def migrate_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate_on, url)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    migrate_offline(get_url())
else:
    asyncio.run(migrate_online(get_url()))
