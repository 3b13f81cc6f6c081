"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter / PostgreSQLAdapter: backend-specific implementations
- Session management: engine and session factory creation
"""

from shortener.db.adapters import PostgreSQLAdapter, SQLiteAdapter, get_database_adapter
from shortener.db.interface import DatabaseAdapter
from shortener.db.session import create_engine_from_settings, create_session_maker, init_models

__all__ = [
    "DatabaseAdapter",
    "SQLiteAdapter",
    "PostgreSQLAdapter",
    "get_database_adapter",
    "create_engine_from_settings",
    "create_session_maker",
    "init_models",
]
