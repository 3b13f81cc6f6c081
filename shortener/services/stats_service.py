"""
Statistics Service

This service handles read-only views of stored short URLs:
- statistics for one code (no visit is counted)
- paginated listing with an optional search term

Nothing here is derived beyond the stored fields plus the full short URL.
"""

import math
from typing import Any, Optional

from shortener.core.exceptions import ShortCodeNotFoundError
from shortener.db.models import ShortURL
from shortener.services.url_store import URLStore

MIN_SEARCH_LENGTH = 3


class StatsService:
    """
    Service for retrieving URL statistics.
    """

    def __init__(
        self,
        store: URLStore,
        base_url: str,
        default_limit: int = 20,
        max_limit: int = 100,
    ):
        """
        Args:
            store: Transactional URL store
            base_url: Prefix for building full short URLs
            default_limit: Page size when the caller gives none
            max_limit: Largest page size honoured
        """
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.default_limit = default_limit
        self.max_limit = max_limit

    def build_short_url(self, short_code: str) -> str:
        return f"{self.base_url}/{short_code}"

    def to_dict(self, short_url: ShortURL) -> dict[str, Any]:
        return {
            "id": short_url.id,
            "original_url": short_url.original_url,
            "short_code": short_url.short_code,
            "short_url": self.build_short_url(short_url.short_code),
            "created_at": short_url.created_at.isoformat(),
            "visit_count": short_url.visit_count,
        }

    async def get_stats(self, short_code: str) -> dict[str, Any]:
        """
        Get statistics for a short URL.

        Returns:
            Dictionary with id, original_url, short_code, short_url,
            created_at and visit_count

        Raises:
            ShortCodeNotFoundError: If the short code is not found
        """
        short_url = await self.store.find_by_short_code(short_code)
        if short_url is None:
            raise ShortCodeNotFoundError(short_code)
        return self.to_dict(short_url)

    async def list_urls(
        self,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        """
        List stored URLs, newest first.

        Non-positive page or limit fall back to the defaults, limit is
        capped at max_limit and search terms shorter than three characters
        are ignored.

        Returns:
            {"data": [...], "pagination": {...}}
        """
        page = page if page and page > 0 else 1
        limit = limit if limit and limit > 0 else self.default_limit
        limit = min(limit, self.max_limit)
        search = search if search and len(search) >= MIN_SEARCH_LENGTH else None

        records, total = await self.store.list_urls(search=search, page=page, limit=limit)
        total_pages = math.ceil(total / limit)

        return {
            "data": [self.to_dict(record) for record in records],
            "pagination": {
                "total": total,
                "page": page,
                "limit": limit,
                "total_pages": total_pages,
                "has_next_page": page < total_pages,
                "has_prev_page": page > 1,
            },
        }
