"""
Database Session Management

This module builds the async engine and session factory from settings.
Uses the database abstraction layer to support different database backends.

Key Features:
- Database abstraction: SQLite or PostgreSQL picked from DATABASE_URL
- No module-level engine: the application container owns its engine
- Sessions are opened per store operation, one transaction each
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from shortener.core.setting import Settings
from shortener.db.adapters import get_database_adapter
from shortener.db.interface import DatabaseAdapter


def create_engine_from_settings(settings: Settings) -> tuple[AsyncEngine, DatabaseAdapter]:
    """
    Create the async engine for the configured database.

    Returns:
        The engine and the adapter that configured it
    """
    adapter = get_database_adapter(
        settings.DATABASE_URL,
        busy_timeout=settings.DATABASE_BUSY_TIMEOUT,
    )
    engine = adapter.create_engine(settings.DATABASE_URL)
    return engine, adapter


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create the async session factory bound to an engine.

    expire_on_commit=False keeps records readable after their transaction
    has committed, which is how the store hands them back to callers.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """
    Create missing tables.

    Used for development and tests; deployed databases are managed
    with the Alembic migrations.
    """
    from shortener.db import models  # noqa: F401  register tables on the metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
