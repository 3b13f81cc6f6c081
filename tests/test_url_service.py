"""
Tests for the collision-resolving creator.

The retry policy is tested against an in-memory fake store, the
uniqueness and idempotence guarantees against the real SQLite store.
"""

import asyncio
import logging
from typing import Optional

import pytest

from shortener.core.exceptions import (
    ExhaustedRetriesError,
    InvalidURLError,
    StoreUnavailableError,
)
from shortener.db.models import ShortURL
from shortener.services.url_encoder import ShortCodeGenerator
from shortener.services.url_service import URLShorteningService
from shortener.services.url_store import CreateResult, CreateStatus, URLStore


class FakeStore:
    """Dict-backed stand-in for URLStore.try_create."""

    def __init__(self, taken_codes=(), fail_with: Optional[Exception] = None):
        self.by_code: dict[str, ShortURL] = {}
        self.by_url: dict[str, ShortURL] = {}
        self.fail_with = fail_with
        self.try_create_calls: list[tuple[str, str]] = []
        self.inserts = 0
        for index, code in enumerate(taken_codes, start=1):
            self._insert(f"https://seed-{index}.example.com", code)

    def _insert(self, original_url: str, short_code: str) -> ShortURL:
        record = ShortURL(
            id=len(self.by_code) + 1,
            original_url=original_url,
            short_code=short_code,
            visit_count=0,
        )
        self.by_code[short_code] = record
        self.by_url[original_url] = record
        return record

    async def try_create(self, original_url: str, short_code: str) -> CreateResult:
        self.try_create_calls.append((original_url, short_code))
        if self.fail_with is not None:
            raise self.fail_with
        if original_url in self.by_url:
            return CreateResult(CreateStatus.EXISTING, self.by_url[original_url])
        if short_code in self.by_code:
            return CreateResult(CreateStatus.CONFLICT)
        self.inserts += 1
        return CreateResult(CreateStatus.CREATED, self._insert(original_url, short_code))


class CountingStore(URLStore):
    """Real store that counts committed inserts."""

    def __init__(self, session_maker):
        super().__init__(session_maker)
        self.created = 0

    async def try_create(self, original_url: str, short_code: str) -> CreateResult:
        result = await super().try_create(original_url, short_code)
        if result.status is CreateStatus.CREATED:
            self.created += 1
        return result


class TestRetryPolicy:
    @pytest.mark.asyncio
    async def test_succeeds_on_third_attempt_after_two_collisions(self, make_generator):
        store = FakeStore(taken_codes=["aaaaaaa", "bbbbbbb"])
        generator = make_generator(["aaaaaaa", "bbbbbbb", "ccccccc"])
        observed = []
        service = URLShorteningService(
            store, generator, on_collision=lambda attempt, code: observed.append((attempt, code))
        )

        record = await service.create_short_url("https://example.com")

        assert record.short_code == "ccccccc"
        assert record.original_url == "https://example.com"
        assert observed == [(1, "aaaaaaa"), (2, "bbbbbbb")]
        assert len(store.try_create_calls) == 3

    @pytest.mark.asyncio
    async def test_exhausts_after_max_attempts(self, make_generator):
        store = FakeStore(taken_codes=["aaaaaaa"])
        observed = []
        service = URLShorteningService(
            store,
            make_generator(["aaaaaaa"]),
            max_attempts=5,
            on_collision=lambda attempt, code: observed.append(attempt),
        )

        with pytest.raises(ExhaustedRetriesError) as exc_info:
            await service.create_short_url("https://example.com")

        assert exc_info.value.attempts == 5
        assert exc_info.value.original_url == "https://example.com"
        assert len(store.try_create_calls) == 5
        assert observed == [1, 2, 3, 4]
        assert store.inserts == 0

    @pytest.mark.asyncio
    async def test_respects_custom_attempt_budget(self, make_generator):
        store = FakeStore(taken_codes=["aaaaaaa"])
        observed = []
        service = URLShorteningService(
            store,
            make_generator(["aaaaaaa"]),
            max_attempts=2,
            on_collision=lambda attempt, code: observed.append(attempt),
        )

        with pytest.raises(ExhaustedRetriesError, match="after 2 attempts"):
            await service.create_short_url("https://example.com")

        assert len(store.try_create_calls) == 2
        assert observed == [1]

    @pytest.mark.asyncio
    async def test_first_attempt_success_does_not_notify(self, make_generator):
        store = FakeStore()
        observed = []
        service = URLShorteningService(
            store, make_generator(["abcdefg"]), on_collision=lambda *args: observed.append(args)
        )

        record = await service.create_short_url("https://example.com")

        assert record.short_code == "abcdefg"
        assert observed == []
        assert len(store.try_create_calls) == 1

    @pytest.mark.asyncio
    async def test_existing_record_returned_without_insert(self, make_generator):
        store = FakeStore()
        existing = store._insert("https://example.com", "zzzzzzz")
        service = URLShorteningService(store, make_generator(["abcdefg"]))

        record = await service.create_short_url("https://example.com")

        assert record is existing
        assert store.inserts == 0

    @pytest.mark.asyncio
    async def test_store_failure_is_not_retried(self, make_generator):
        store = FakeStore(fail_with=StoreUnavailableError("try_create failed"))
        observed = []
        service = URLShorteningService(
            store, make_generator(["abcdefg"]), on_collision=lambda *args: observed.append(args)
        )

        with pytest.raises(StoreUnavailableError):
            await service.create_short_url("https://example.com")

        assert len(store.try_create_calls) == 1
        assert observed == []

    @pytest.mark.asyncio
    async def test_invalid_url_never_reaches_store(self, make_generator):
        store = FakeStore()
        service = URLShorteningService(store, make_generator(["abcdefg"]))

        with pytest.raises(InvalidURLError):
            await service.create_short_url("ftp://example.com")

        assert store.try_create_calls == []

    @pytest.mark.asyncio
    async def test_default_observer_logs_collision(self, make_generator, caplog):
        store = FakeStore(taken_codes=["aaaaaaa"])
        service = URLShorteningService(store, make_generator(["aaaaaaa", "bbbbbbb"]))

        with caplog.at_level(logging.WARNING, logger="shortener.services.url_service"):
            await service.create_short_url("https://example.com")

        assert "Collision detected" in caplog.text
        assert "Retry attempt: 1" in caplog.text

    def test_rejects_empty_attempt_budget(self, make_generator):
        with pytest.raises(ValueError):
            URLShorteningService(FakeStore(), make_generator(["abcdefg"]), max_attempts=0)


class TestWithDatabase:
    @pytest.mark.asyncio
    async def test_collision_scenario_against_real_store(self, store, make_generator):
        await store.try_create("https://seed-a.example.com", "aaaaaaa")
        await store.try_create("https://seed-b.example.com", "bbbbbbb")
        observed = []
        service = URLShorteningService(
            store,
            make_generator(["aaaaaaa", "bbbbbbb", "ccccccc"]),
            on_collision=lambda attempt, code: observed.append(attempt),
        )

        record = await service.create_short_url("https://example.com")

        assert record.short_code == "ccccccc"
        assert observed == [1, 2]
        assert (await store.find_by_short_code("aaaaaaa")).original_url == "https://seed-a.example.com"

    @pytest.mark.asyncio
    async def test_create_twice_returns_same_record(self, container):
        store = CountingStore(container.session_maker)
        service = URLShorteningService(store, container.generator)

        first = await service.create_short_url("https://example.com/page")
        second = await service.create_short_url("https://example.com/page")

        assert first.id == second.id
        assert first.short_code == second.short_code
        assert first.created_at == second.created_at
        assert first.created_at.isoformat() == second.created_at.isoformat()
        assert store.created == 1

    @pytest.mark.asyncio
    async def test_retry_within_one_millisecond_tries_a_new_code(self, store):
        seeded = ShortCodeGenerator(clock=lambda: 1700000000000).generate("https://example.com/page")
        await store.try_create("https://seed.example.com/", seeded)
        observed = []
        service = URLShorteningService(
            store,
            ShortCodeGenerator(clock=lambda: 1700000000000),
            on_collision=lambda attempt, code: observed.append(code),
        )

        record = await service.create_short_url("https://example.com/page")

        assert record.short_code != seeded
        assert observed == [seeded]

    @pytest.mark.asyncio
    async def test_concurrent_creations_of_same_url_share_one_record(self, container):
        store = CountingStore(container.session_maker)
        service = URLShorteningService(store, container.generator)

        records = await asyncio.gather(
            *(service.create_short_url("https://example.com/same") for _ in range(10))
        )

        assert len({record.id for record in records}) == 1
        assert len({record.short_code for record in records}) == 1
        assert store.created == 1
        _, total = await store.list_urls()
        assert total == 1

    @pytest.mark.asyncio
    async def test_concurrent_distinct_urls_get_distinct_codes(self, container):
        service = container.url_service
        urls = [f"https://example.com/page/{i}" for i in range(20)]

        records = await asyncio.gather(*(service.create_short_url(url) for url in urls))

        assert len({record.short_code for record in records}) == len(urls)
        assert {record.original_url for record in records} == set(urls)

    @pytest.mark.asyncio
    async def test_new_record_starts_unvisited(self, container):
        record = await container.url_service.create_short_url("https://example.com/new")

        assert record.id is not None
        assert record.visit_count == 0
        assert record.created_at is not None
        assert len(record.short_code) == 7
