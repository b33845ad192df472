# src/cache/redis_store.py — v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Uses the asyncio client shipped with the 'redis' package so that every
round trip suspends the calling task instead of blocking the event loop.
Errors are not caught here: fail-soft policy belongs to ContentCache.
"""

from __future__ import annotations

import logging
from typing import Any

from newsrag.cache.base_cache_store import BaseCacheStore

logger = logging.getLogger(__name__)

_SCAN_BATCH = 500


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store."""

    def __init__(self, redis_url: str = "redis://localhost:6379", client: Any = None) -> None:
        if client is not None:
            self._client = client
            return
        try:
            import redis.asyncio as aioredis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = aioredis.Redis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> None:
        if ttl_s is None:
            await self._client.set(key, value)
        else:
            await self._client.setex(key, ttl_s, value)

    async def mget(self, keys: list[str]) -> list[str | None]:
        if not keys:
            return []
        return list(await self._client.mget(keys))

    async def delete(self, keys: list[str]) -> int:
        if not keys:
            return 0
        return int(await self._client.delete(*keys))

    async def keys(self, pattern: str) -> list[str]:
        """SCAN-based listing; never issues a blocking KEYS."""
        return [k async for k in self._client.scan_iter(match=pattern, count=_SCAN_BATCH)]

    async def delete_pattern(self, pattern: str) -> int:
        removed = 0
        batch: list[str] = []
        async for key in self._client.scan_iter(match=pattern, count=_SCAN_BATCH):
            batch.append(key)
            if len(batch) >= _SCAN_BATCH:
                removed += await self.delete(batch)
                batch = []
        if batch:
            removed += await self.delete(batch)
        logger.debug("Deleted %d keys matching %s", removed, pattern)
        return removed

    async def rpush(self, key: str, value: str) -> int:
        return int(await self._client.rpush(key, value))

    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> list[str]:
        return list(await self._client.lrange(key, start, stop))

    async def expire(self, key: str, ttl_s: int) -> bool:
        return bool(await self._client.expire(key, ttl_s))

    async def ttl(self, key: str) -> int:
        return int(await self._client.ttl(key))

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()

    @property
    def backend_name(self) -> str:
        return "redis"
