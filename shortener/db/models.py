"""
Database Models for URL Shortener Service

This module defines the SQLModel database schema for:
- ShortURL: Stores the mapping between short codes and original URLs

Design Decisions:
- Unique index on short_code: the store's uniqueness key and the hot lookup path
- Unique index on original_url: one record per URL, a database-level backstop
  for concurrent first-time creations when isolation is below serializable
- Index on created_at for newest-first listing
- visit_count lives on the row so a resolution is one UPDATE, no joins
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.types import TypeDecorator
from sqlmodel import Column, Field, SQLModel

from shortener.core.setting import MAX_SHORT_CODE_LENGTH


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime stored and returned in UTC.

    SQLite keeps no offset, so values read back are naive; they are UTC by
    construction and get tzinfo re-attached. Records fresh from an insert and
    records loaded later compare and serialise the same way.
    """
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Auto-incrementing primary key, assigned by the database
    - original_url: The long URL that was shortened
    - short_code: Unique fixed-length code over the configured alphabet
    - created_at: Timestamp when URL was shortened, never updated
    - visit_count: Number of resolutions, only ever incremented
    """
    __tablename__ = "short_urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    original_url: str = Field(
        sa_column=Column(Text, nullable=False, unique=True)
    )
    short_code: str = Field(
        sa_column=Column(
            String(MAX_SHORT_CODE_LENGTH), nullable=False, unique=True, index=True
        ),
        max_length=MAX_SHORT_CODE_LENGTH
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(UTCDateTime(), nullable=False, index=True)
    )
    visit_count: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
