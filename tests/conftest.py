"""Shared pytest fixtures: scratch SQLite database, wired services and an API client."""

from typing import AsyncGenerator, Iterable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from shortener.core.container import ServiceContainer, build_container
from shortener.core.setting import Settings
from shortener.db.session import init_models
from shortener.main import create_app
from shortener.services.url_store import URLStore


class StubGenerator:
    """Emits a fixed sequence of codes, repeating the last one when exhausted."""

    def __init__(self, codes: Iterable[str]):
        self.codes = list(codes)
        self.calls: list[str] = []

    def generate(self, original_url: str) -> str:
        index = min(len(self.calls), len(self.codes) - 1)
        self.calls.append(original_url)
        return self.codes[index]


@pytest.fixture
def make_generator():
    return StubGenerator


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'shortener-test.db'}",
        BASE_URL="http://short.est",
        RATE_LIMIT_ENABLED=False,
        LOG_LEVEL="DEBUG",
    )


@pytest_asyncio.fixture
async def container(test_settings: Settings) -> AsyncGenerator[ServiceContainer, None]:
    container = build_container(test_settings)
    await init_models(container.engine)
    yield container
    await container.dispose()


@pytest.fixture
def store(container: ServiceContainer) -> URLStore:
    return container.store


@pytest_asyncio.fixture
async def client(
    test_settings: Settings, container: ServiceContainer
) -> AsyncGenerator[AsyncClient, None]:
    app = create_app(test_settings, container=container)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
