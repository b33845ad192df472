# tests/unit/cache/test_redis_store.py — v2
"""Tests for cache/redis_store.py — mocked asyncio Redis client."""

from __future__ import annotations

import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

from newsrag.cache.redis_store import RedisCacheStore


def _async_iter(items):
    async def gen(*args, **kwargs):
        for item in items:
            yield item
    return gen


@pytest.fixture
def mock_client():
    client = MagicMock()
    for name in ("get", "set", "setex", "mget", "delete", "rpush", "lrange",
                 "expire", "ttl", "ping", "aclose"):
        setattr(client, name, AsyncMock())
    return client


@pytest.fixture
def store(mock_client):
    return RedisCacheStore(client=mock_client)


class TestRedisCacheStore:
    def test_import_error_without_redis(self):
        """Clear ImportError when redis is not available."""
        saved = {k: sys.modules.get(k) for k in ("redis", "redis.asyncio")}
        sys.modules["redis"] = None  # type: ignore[assignment]
        sys.modules["redis.asyncio"] = None  # type: ignore[assignment]
        try:
            with pytest.raises(ImportError, match="redis"):
                RedisCacheStore(redis_url="redis://localhost")
        finally:
            for name, mod in saved.items():
                if mod is not None:
                    sys.modules[name] = mod
                else:
                    sys.modules.pop(name, None)

    @pytest.mark.asyncio
    async def test_set_with_ttl_uses_setex(self, store, mock_client):
        await store.set("k", "v", 60)
        mock_client.setex.assert_awaited_once_with("k", 60, "v")
        mock_client.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_without_ttl(self, store, mock_client):
        await store.set("k", "v")
        mock_client.set.assert_awaited_once_with("k", "v")

    @pytest.mark.asyncio
    async def test_get(self, store, mock_client):
        mock_client.get.return_value = "v"
        assert await store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_mget_single_round_trip(self, store, mock_client):
        mock_client.mget.return_value = ["1", None]
        assert await store.mget(["a", "b"]) == ["1", None]
        mock_client.mget.assert_awaited_once_with(["a", "b"])

    @pytest.mark.asyncio
    async def test_mget_empty_skips_call(self, store, mock_client):
        assert await store.mget([]) == []
        mock_client.mget.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete(self, store, mock_client):
        mock_client.delete.return_value = 2
        assert await store.delete(["a", "b"]) == 2
        mock_client.delete.assert_awaited_once_with("a", "b")
        assert await store.delete([]) == 0

    @pytest.mark.asyncio
    async def test_keys_uses_scan(self, store, mock_client):
        mock_client.scan_iter = _async_iter(["query:1", "query:2"])
        assert await store.keys("query:*") == ["query:1", "query:2"]

    @pytest.mark.asyncio
    async def test_delete_pattern(self, store, mock_client):
        mock_client.scan_iter = _async_iter(["search:1", "search:2", "search:3"])
        mock_client.delete.return_value = 3
        assert await store.delete_pattern("search:*") == 3
        mock_client.delete.assert_awaited_once_with("search:1", "search:2", "search:3")

    @pytest.mark.asyncio
    async def test_list_and_ttl_ops(self, store, mock_client):
        mock_client.rpush.return_value = 4
        mock_client.lrange.return_value = ["a", "b"]
        mock_client.expire.return_value = 1
        mock_client.ttl.return_value = 42
        assert await store.rpush("chat:s", "m") == 4
        assert await store.lrange("chat:s", 0, -1) == ["a", "b"]
        assert await store.expire("chat:s", 3600) is True
        assert await store.ttl("chat:s") == 42

    @pytest.mark.asyncio
    async def test_errors_propagate(self, store, mock_client):
        mock_client.get.side_effect = ConnectionError("refused")
        with pytest.raises(ConnectionError):
            await store.get("k")

    @pytest.mark.asyncio
    async def test_close(self, store, mock_client):
        await store.close()
        mock_client.aclose.assert_awaited_once()
        assert store.backend_name == "redis"
