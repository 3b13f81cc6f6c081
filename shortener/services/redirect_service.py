"""
Redirect Service

This service resolves short codes back to their original URLs.

Every successful resolution counts as one visit. The lookup and the
increment happen in the same store transaction, so concurrent
resolutions of one code are each counted exactly once.
"""

import logging
from urllib.parse import urlparse

from shortener.core.exceptions import ShortCodeNotFoundError
from shortener.services.url_store import URLStore

logger = logging.getLogger(__name__)


def extract_short_code(short_url: str) -> str:
    """
    Return the code part of a full short URL.

    Example:
        extract_short_code("http://short.est/abcDE12") -> "abcDE12"
    """
    path = urlparse(short_url).path
    return path.rstrip("/").rsplit("/", 1)[-1]


class RedirectService:
    """
    Service for handling URL redirections.
    """

    def __init__(self, store: URLStore):
        """
        Args:
            store: Transactional URL store
        """
        self.store = store

    async def resolve(self, short_code: str) -> str:
        """
        Get the original URL for a code and count the visit.

        Raises:
            ShortCodeNotFoundError: If no record has this code
            StoreUnavailableError: If the database operation fails
        """
        try:
            record = await self.store.resolve_and_touch(short_code)
        except ShortCodeNotFoundError:
            logger.debug(f"Short code '{short_code}' not found")
            raise
        return record.original_url

    async def decode(self, short_url: str) -> str:
        """Resolve a full short URL (scheme, host and code) to its original URL."""
        short_code = extract_short_code(short_url)
        if not short_code:
            raise ShortCodeNotFoundError(short_code)
        return await self.resolve(short_code)
