"""
Database Adapters

Implementations of the DatabaseAdapter interface for SQLite and PostgreSQL.

SQLite is a file-based database that's perfect for:
- Local development
- Testing
- Single-instance deployments

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time (file locking)

PostgreSQL is the production backend: pooled connections, row-level locks
and the unique constraints do the serialization.
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from shortener.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    Every transaction starts with BEGIN IMMEDIATE, which takes the database
    write lock up front. A check-and-insert or read-and-increment therefore
    runs alone; other writers wait up to busy_timeout seconds and then fail
    with "database is locked".
    """

    def __init__(self, busy_timeout: float = 30.0):
        self.busy_timeout = busy_timeout

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        SQLite-specific configuration:
        - NullPool: one connection per session, nothing held between transactions
        - check_same_thread=False: Required for async SQLite operations
        - the driver's own implicit BEGIN is disabled, we emit BEGIN IMMEDIATE
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        engine = create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _disable_driver_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine.sync_engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False,
            "timeout": self.busy_timeout,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def get_dialect_name(self) -> str:
        return "sqlite"


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter implementation (asyncpg driver).

    Runs at the default READ COMMITTED level. An UPDATE row lock serializes
    concurrent increments of the same code; the unique constraints reject
    whichever of two racing inserts commits second.
    """

    def __init__(self, pool_size: int = 10, max_overflow: int = 20):
        self.pool_size = pool_size
        self.max_overflow = max_overflow

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)
        return create_async_engine(
            database_url,
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

    def get_pool_class(self) -> None:
        # Default AsyncAdaptedQueuePool
        return None

    def get_connect_args(self) -> dict[str, Any]:
        return {}

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": True,
        }

    def get_dialect_name(self) -> str:
        return "postgresql"


def get_database_adapter(database_url: str, busy_timeout: float = 30.0) -> DatabaseAdapter:
    """
    Factory function to get the database adapter for a connection string.

    Args:
        database_url: SQLAlchemy URL, the scheme picks the adapter
        busy_timeout: Lock wait for SQLite writers, in seconds

    Returns:
        DatabaseAdapter instance

    Raises:
        ValueError: If the URL scheme has no adapter
    """
    scheme = database_url.split(":", 1)[0].lower()
    dialect = scheme.split("+", 1)[0]

    if dialect == "sqlite":
        return SQLiteAdapter(busy_timeout=busy_timeout)
    if dialect in ("postgresql", "postgres"):
        return PostgreSQLAdapter()

    raise ValueError(f"Unsupported database URL scheme: '{scheme}'")
