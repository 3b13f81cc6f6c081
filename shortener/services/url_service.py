"""
URL Shortening Service

This service handles the core business logic for creating short URLs:
- Validating the original URL
- Generating candidate codes
- Driving the store's transactional check-and-insert until a code sticks

Retry policy:
- A collision (CreateStatus.CONFLICT) is answered with a fresh generation;
  the time salt makes the next candidate differ
- No delay between attempts, waiting does not make a taken code free
- After max_attempts collisions the call fails with ExhaustedRetriesError
- StoreUnavailableError is not a collision and is never retried here

The loop is plain control flow so the attempt budget and the collision
observer are constructor parameters that tests can set directly.
"""

import logging
from typing import Callable, Optional

from shortener.core.exceptions import ExhaustedRetriesError, InvalidURLError
from shortener.core.validators import is_valid_url
from shortener.db.models import ShortURL
from shortener.services.url_encoder import ShortCodeGenerator
from shortener.services.url_store import CreateStatus, URLStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5

# Called with (attempt number, colliding code) before each retry
CollisionObserver = Callable[[int, str], None]


def log_collision(attempt: int, short_code: str) -> None:
    logger.warning(
        f"Collision detected when generating short URL "
        f"(code '{short_code}'). Retry attempt: {attempt}"
    )


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Separated from API layer for testability and maintainability.
    """

    def __init__(
        self,
        store: URLStore,
        generator: ShortCodeGenerator,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        on_collision: Optional[CollisionObserver] = None,
    ):
        """
        Initialize the URL shortening service.

        Args:
            store: Transactional URL store
            generator: Short code generator
            max_attempts: Generation attempts before giving up (at least 1)
            on_collision: Observer invoked for every collision that is retried
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        self.store = store
        self.generator = generator
        self.max_attempts = max_attempts
        self.on_collision = on_collision or log_collision

    async def create_short_url(self, original_url: str) -> ShortURL:
        """
        Create a new short URL or return existing one if URL was already shortened.

        Args:
            original_url: The long URL to shorten

        Returns:
            ShortURL object with short_code populated

        Raises:
            InvalidURLError: If URL format is invalid
            ExhaustedRetriesError: If every attempt collided
            StoreUnavailableError: If the database operation fails
        """
        if not is_valid_url(original_url):
            raise InvalidURLError(
                original_url,
                reason="Invalid URL format. URL must use http:// or https:// and have a valid domain"
            )

        for attempt in range(1, self.max_attempts + 1):
            short_code = self.generator.generate(original_url)
            logger.debug(f"Generated short code '{short_code}' for URL: {original_url}")

            result = await self.store.try_create(original_url, short_code)

            if result.status is CreateStatus.CREATED:
                logger.info(f"Created short code '{short_code}' for URL: {original_url}")
                return result.record

            if result.status is CreateStatus.EXISTING:
                logger.info(f"URL already exists: {original_url}, returning existing record")
                return result.record

            if attempt < self.max_attempts:
                self.on_collision(attempt, short_code)

        logger.error(
            f"Giving up on URL {original_url} after {self.max_attempts} colliding attempts"
        )
        raise ExhaustedRetriesError(original_url, self.max_attempts)
