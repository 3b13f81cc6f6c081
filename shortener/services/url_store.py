"""
URL Store

Transactional persistence for short URLs. This is the only code that
writes to the short_urls table.

Operations:
- find_by_original_url / find_by_short_code: point lookups, no side effects
- try_create: check-and-insert in one transaction, returns CREATED,
  EXISTING or CONFLICT
- resolve_and_touch: atomic visit-count increment and read in one transaction
- list_urls: search and offset pagination

Design Decisions:
- Every operation opens its own session and transaction. A check and the
  write it guards are never split across transactions, otherwise two
  callers can both pass the check and both write.
- Collisions are reported as a value (CreateStatus.CONFLICT), not an
  exception, so the creator branches on the result.
- The unique constraints on short_code and original_url are the backstop
  when the backend lets two transactions interleave; an IntegrityError is
  turned back into EXISTING or CONFLICT.
- Database failures become StoreUnavailableError and are never retried here.
- No caching of records or counts in process.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shortener.core.exceptions import ShortCodeNotFoundError, StoreUnavailableError
from shortener.db.models import ShortURL

logger = logging.getLogger(__name__)


class CreateStatus(str, Enum):
    """Outcome of a transactional check-and-insert."""
    CREATED = "created"
    EXISTING = "existing"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class CreateResult:
    status: CreateStatus
    record: Optional[ShortURL] = None


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class URLStore:
    """
    Transactional store for ShortURL records.

    Args:
        session_maker: Factory for async sessions bound to the engine
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """
        Open a session for one operation and translate connectivity failures.

        A session closed without commit rolls back, so an exception inside
        the block never leaves a partial write behind.
        """
        try:
            async with self.session_maker() as session:
                yield session
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error(f"Store operation '{operation}' failed: {e}")
            raise StoreUnavailableError(f"{operation} failed", original_error=e) from e

    @staticmethod
    async def _select_by_original_url(session: AsyncSession, original_url: str) -> Optional[ShortURL]:
        statement = select(ShortURL).where(ShortURL.original_url == original_url).limit(1)
        result = await session.execute(statement)
        return result.scalars().first()

    @staticmethod
    async def _select_by_short_code(session: AsyncSession, short_code: str) -> Optional[ShortURL]:
        statement = select(ShortURL).where(ShortURL.short_code == short_code)
        result = await session.execute(statement)
        return result.scalar_one_or_none()

    async def find_by_original_url(self, original_url: str) -> Optional[ShortURL]:
        """
        Look up the record for an original URL.

        Returns:
            ShortURL object if found, None otherwise
        """
        async with self._session("find_by_original_url") as session:
            return await self._select_by_original_url(session, original_url)

    async def find_by_short_code(self, short_code: str) -> Optional[ShortURL]:
        """
        Look up the record for a short code without counting a visit.

        Returns:
            ShortURL object if found, None otherwise
        """
        async with self._session("find_by_short_code") as session:
            return await self._select_by_short_code(session, short_code)

    async def try_create(self, original_url: str, short_code: str) -> CreateResult:
        """
        Insert a record for original_url under short_code, in one transaction.

        Steps, all inside the same transaction:
        1. re-check original_url: an existing record is returned (EXISTING),
           so concurrent creations of the same URL converge on one record
        2. check short_code: if taken, roll back and report CONFLICT
        3. insert with visit_count = 0 and commit (CREATED)

        Args:
            original_url: The long URL to store
            short_code: Candidate code from the generator

        Returns:
            CreateResult with the record (None for CONFLICT)

        Raises:
            StoreUnavailableError: If the database cannot complete the transaction
        """
        try:
            async with self._session("try_create") as session:
                existing = await self._select_by_original_url(session, original_url)
                if existing is not None:
                    await session.commit()
                    return CreateResult(CreateStatus.EXISTING, existing)

                taken = await self._select_by_short_code(session, short_code)
                if taken is not None:
                    await session.rollback()
                    return CreateResult(CreateStatus.CONFLICT)

                record = ShortURL(
                    original_url=original_url,
                    short_code=short_code,
                    visit_count=0,
                )
                session.add(record)
                await session.flush()
                await session.commit()
                return CreateResult(CreateStatus.CREATED, record)

        except IntegrityError:
            # Lost an insert race the isolation level let through.
            # The session was closed without commit, nothing was written.
            logger.info(
                f"Unique constraint rejected insert of '{short_code}', re-reading original URL"
            )
            existing = await self.find_by_original_url(original_url)
            if existing is not None:
                return CreateResult(CreateStatus.EXISTING, existing)
            return CreateResult(CreateStatus.CONFLICT)

    async def resolve_and_touch(self, short_code: str) -> ShortURL:
        """
        Increment the visit count of a code and return the updated record.

        Uses a database-level UPDATE (visit_count = visit_count + 1) rather
        than read-modify-write, and reads the row back in the same
        transaction, so concurrent resolutions never lose an increment.

        Raises:
            ShortCodeNotFoundError: If no record has this code (nothing is written)
            StoreUnavailableError: If the database cannot complete the transaction
        """
        async with self._session("resolve_and_touch") as session:
            statement = (
                update(ShortURL)
                .where(ShortURL.short_code == short_code)
                .values(visit_count=ShortURL.visit_count + 1)
                .execution_options(synchronize_session=False)
            )
            result = await session.execute(statement)

            if result.rowcount == 0:
                await session.rollback()
                raise ShortCodeNotFoundError(short_code)

            record = await self._select_by_short_code(session, short_code)
            await session.commit()
            return record

    async def list_urls(
        self,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[ShortURL], int]:
        """
        List records newest first with an optional substring search.

        Args:
            search: Case-insensitive substring of original_url (None for all)
            page: 1-based page number
            limit: Records per page

        Returns:
            (records on the page, total matching records)
        """
        conditions = []
        if search:
            conditions.append(
                ShortURL.original_url.ilike(f"%{_escape_like(search)}%", escape="\\")
            )

        count_statement = select(func.count()).select_from(ShortURL).where(*conditions)
        page_statement = (
            select(ShortURL)
            .where(*conditions)
            .order_by(ShortURL.created_at.desc(), ShortURL.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )

        async with self._session("list_urls") as session:
            total = (await session.execute(count_statement)).scalar_one()
            records = list((await session.execute(page_statement)).scalars().all())
            return records, total
