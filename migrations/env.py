"""
Alembic Environment Configuration

This file configures Alembic to work with our async SQLModel/SQLAlchemy setup.
It handles:
- Database connection from settings
- Model imports for autogenerate
- Online migrations through the async driver from DATABASE_URL
- Offline (SQL script) migrations through the matching sync dialect
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from shortener.core.setting import settings
from sqlmodel import SQLModel
from shortener.db import models  # noqa: F401  Import all models so Alembic can detect them

# this is the Alembic Config object
config = context.config

ASYNC_TO_SYNC_DRIVERS = {
    "sqlite+aiosqlite://": "sqlite://",
    "postgresql+asyncpg://": "postgresql+psycopg2://",
}


def to_sync_url(database_url: str) -> str:
    """Swap an async driver prefix for its sync counterpart."""
    for async_prefix, sync_prefix in ASYNC_TO_SYNC_DRIVERS.items():
        if database_url.startswith(async_prefix):
            return sync_prefix + database_url[len(async_prefix):]
    return database_url


config.set_main_option("sqlalchemy.url", to_sync_url(settings.DATABASE_URL))

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Get SQLModel metadata for autogenerate
target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    This configures the context with just a URL
    and not an Engine, so no DBAPI needs to be available.

    Calls to context.execute() here emit the given string to the
    script output.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with a connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = create_async_engine(settings.DATABASE_URL, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode with the application's async driver."""
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
