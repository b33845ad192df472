# src/cache/memory_store.py — v2
"""In-process cache store (CACHE_BACKEND=memory).

Mirrors the Redis semantics the rest of the package relies on: SETEX
replaces value and TTL, RPUSH keeps an existing TTL, EXPIRE on a missing
key is a no-op. Expiry is passive (checked on access) with an optional
purge_expired() sweep for memory pressure. Single-process only.
"""

from __future__ import annotations

import fnmatch
import math
import time
from datetime import datetime, timedelta, timezone
from typing import Callable

from newsrag.cache.base_cache_store import BaseCacheStore
from newsrag.cache.models import CacheEntry


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed store with TTL, for development and tests.

    Args:
        clock: Monotonic clock in seconds. Tests inject a fake to simulate
            elapsed time without sleeping.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._data: dict[str, str | list[str]] = {}
        self._expires: dict[str, float] = {}

    # -- internals --------------------------------------------------------

    def _alive(self, key: str) -> bool:
        if key not in self._data:
            return False
        deadline = self._expires.get(key)
        if deadline is not None and deadline <= self._clock():
            self._drop(key)
            return False
        return True

    def _drop(self, key: str) -> None:
        self._data.pop(key, None)
        self._expires.pop(key, None)

    # -- BaseCacheStore ---------------------------------------------------

    async def get(self, key: str) -> str | None:
        if not self._alive(key):
            return None
        value = self._data[key]
        if isinstance(value, list):
            raise TypeError(f"WRONGTYPE key {key!r} holds a list")
        return value

    async def set(self, key: str, value: str, ttl_s: int | None = None) -> None:
        self._data[key] = value
        if ttl_s is None:
            self._expires.pop(key, None)
        else:
            self._expires[key] = self._clock() + ttl_s

    async def mget(self, keys: list[str]) -> list[str | None]:
        results: list[str | None] = []
        for key in keys:
            value = self._data.get(key) if self._alive(key) else None
            results.append(value if isinstance(value, str) else None)
        return results

    async def delete(self, keys: list[str]) -> int:
        removed = 0
        for key in keys:
            if self._alive(key):
                self._drop(key)
                removed += 1
        return removed

    async def keys(self, pattern: str) -> list[str]:
        return [k for k in list(self._data) if self._alive(k) and fnmatch.fnmatchcase(k, pattern)]

    async def delete_pattern(self, pattern: str) -> int:
        return await self.delete(await self.keys(pattern))

    async def rpush(self, key: str, value: str) -> int:
        if not self._alive(key):
            self._data[key] = []
        current = self._data[key]
        if not isinstance(current, list):
            raise TypeError(f"WRONGTYPE key {key!r} holds a string")
        current.append(value)
        return len(current)

    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> list[str]:
        if not self._alive(key):
            return []
        current = self._data[key]
        if not isinstance(current, list):
            raise TypeError(f"WRONGTYPE key {key!r} holds a string")
        # Redis stop index is inclusive
        end = None if stop == -1 else stop + 1
        return list(current[start:end])

    async def expire(self, key: str, ttl_s: int) -> bool:
        if not self._alive(key):
            return False
        self._expires[key] = self._clock() + ttl_s
        return True

    async def ttl(self, key: str) -> int:
        if not self._alive(key):
            return -2
        deadline = self._expires.get(key)
        if deadline is None:
            return -1
        return math.ceil(deadline - self._clock())

    async def ping(self) -> bool:
        return True

    @property
    def backend_name(self) -> str:
        return "memory"

    # -- extras -----------------------------------------------------------

    def purge_expired(self) -> int:
        """Drop every expired key now; return how many were removed."""
        now = self._clock()
        expired = [k for k, deadline in self._expires.items() if deadline <= now]
        for key in expired:
            self._drop(key)
        return len(expired)

    def entries(self) -> list[CacheEntry]:
        """Snapshot of live string entries with wall-clock expiry."""
        now_wall = datetime.now(timezone.utc)
        now = self._clock()
        snapshot: list[CacheEntry] = []
        for key in list(self._data):
            if not self._alive(key) or isinstance(self._data[key], list):
                continue
            deadline = self._expires.get(key)
            expires_at = (
                now_wall + timedelta(seconds=deadline - now) if deadline is not None else None
            )
            snapshot.append(CacheEntry(key=key, value=self._data[key], expires_at=expires_at))
        return snapshot
