"""
Service Container

Builds the engine, the store and the services once per application
instance and hands them to the API through app.state.

Design:
- Explicit wiring: every service gets its collaborators and configuration
  through its constructor, nothing reads module globals at call time
- One engine per application instance, disposed on shutdown
- Tests build their own container against a throwaway database
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from shortener.core.setting import Settings
from shortener.db.interface import DatabaseAdapter
from shortener.db.session import create_engine_from_settings, create_session_maker
from shortener.services.redirect_service import RedirectService
from shortener.services.stats_service import StatsService
from shortener.services.url_encoder import ShortCodeGenerator
from shortener.services.url_service import CollisionObserver, URLShorteningService
from shortener.services.url_store import URLStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    engine: AsyncEngine
    adapter: DatabaseAdapter
    session_maker: async_sessionmaker[AsyncSession]
    store: URLStore
    generator: ShortCodeGenerator
    url_service: URLShorteningService
    redirect_service: RedirectService
    stats_service: StatsService

    async def dispose(self) -> None:
        """Close all pooled database connections."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


def build_container(
    settings: Settings,
    on_collision: Optional[CollisionObserver] = None,
) -> ServiceContainer:
    """
    Wire the store and services for one application instance.

    Args:
        settings: Configuration to build from
        on_collision: Optional observer for retried collisions (default: log a warning)
    """
    engine, adapter = create_engine_from_settings(settings)
    session_maker = create_session_maker(engine)
    store = URLStore(session_maker)
    generator = ShortCodeGenerator(
        length=settings.SHORT_CODE_LENGTH,
        alphabet=settings.SHORT_CODE_ALPHABET,
    )

    container = ServiceContainer(
        settings=settings,
        engine=engine,
        adapter=adapter,
        session_maker=session_maker,
        store=store,
        generator=generator,
        url_service=URLShorteningService(
            store,
            generator,
            max_attempts=settings.MAX_CREATE_ATTEMPTS,
            on_collision=on_collision,
        ),
        redirect_service=RedirectService(store),
        stats_service=StatsService(
            store,
            base_url=settings.BASE_URL,
            default_limit=settings.LIST_DEFAULT_LIMIT,
            max_limit=settings.LIST_MAX_LIMIT,
        ),
    )

    logger.info(
        f"Services initialized: dialect={adapter.get_dialect_name()}, "
        f"code_length={settings.SHORT_CODE_LENGTH}, "
        f"max_attempts={settings.MAX_CREATE_ATTEMPTS}"
    )
    return container
