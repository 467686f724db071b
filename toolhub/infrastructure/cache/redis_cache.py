import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

from toolhub.application.interfaces.i_cache_service import ICacheService

logger = logging.getLogger(__name__)


class RedisCacheService(ICacheService):
    """Redis-backed cache, shared by every worker pointed at the same instance.

    Values are stored as JSON under ``{namespace}:{key}``.
    """

    def __init__(
        self,
        redis_url: str,
        default_ttl: int = 3600,
        namespace: str = "toolhub",
        client: Optional[redis.Redis] = None,
    ):
        self._redis_url = redis_url
        self._default_ttl = default_ttl
        self._namespace = namespace
        self._client = client

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def _get_client(self) -> redis.Redis:
        """Get or create the Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def get(self, key: str) -> Optional[Any]:
        client = await self._get_client()
        raw = await client.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring non-JSON cache entry for key '%s'", key)
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl_seconds: int | None = None,
    ) -> None:
        client = await self._get_client()
        await client.set(
            self._key(key),
            json.dumps(value),
            ex=ttl_seconds or self._default_ttl,
        )

    async def delete(self, key: str) -> None:
        client = await self._get_client()
        await client.delete(self._key(key))

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
