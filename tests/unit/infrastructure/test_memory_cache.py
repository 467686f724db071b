"""
Unit tests for the in-memory cache service.
"""

import pytest

from toolhub.infrastructure.cache.memory_cache import InMemoryCacheService


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
class TestInMemoryCacheService:
    """Tests for InMemoryCacheService."""

    @pytest.fixture
    def clock(self) -> FakeClock:
        return FakeClock()

    @pytest.fixture
    def cache(self, clock: FakeClock) -> InMemoryCacheService:
        return InMemoryCacheService(default_ttl=60, clock=clock)

    async def test_set_and_get(self, cache: InMemoryCacheService):
        await cache.set("mcp_tools:default", [{"name": "mcp__a__b"}])
        assert await cache.get("mcp_tools:default") == [{"name": "mcp__a__b"}]

    async def test_missing_key(self, cache: InMemoryCacheService):
        assert await cache.get("missing") is None

    async def test_entry_expires_after_ttl(self, cache: InMemoryCacheService, clock: FakeClock):
        await cache.set("key", "value", ttl_seconds=30)

        clock.now += 29
        assert await cache.get("key") == "value"

        clock.now += 1
        assert await cache.get("key") is None

    async def test_default_ttl(self, cache: InMemoryCacheService, clock: FakeClock):
        await cache.set("key", "value")
        clock.now += 60
        assert await cache.get("key") is None

    async def test_delete(self, cache: InMemoryCacheService):
        await cache.set("key", "value")
        await cache.delete("key")
        await cache.delete("never-set")
        assert await cache.get("key") is None
