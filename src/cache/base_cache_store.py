# src/cache/base_cache_store.py — v2
"""Abstract key/value backend with per-key TTL and list operations.

Both the content-addressed cache and the conversation store sit on top of
this interface. Values are strings; serialization is the caller's concern.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored at key, or None."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_s: int | None = None) -> None:
        """Store value at key, replacing any previous value and TTL."""

    @abstractmethod
    async def mget(self, keys: list[str]) -> list[str | None]:
        """Fetch several keys in one round trip, aligned with input order."""

    @abstractmethod
    async def delete(self, keys: list[str]) -> int:
        """Delete keys; return how many existed."""

    @abstractmethod
    async def keys(self, pattern: str) -> list[str]:
        """List keys matching a glob-style pattern."""

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob-style pattern; return the count."""

    @abstractmethod
    async def rpush(self, key: str, value: str) -> int:
        """Append to the list at key (created if missing); return new length."""

    @abstractmethod
    async def lrange(self, key: str, start: int = 0, stop: int = -1) -> list[str]:
        """Return list elements between start and stop (inclusive)."""

    @abstractmethod
    async def expire(self, key: str, ttl_s: int) -> bool:
        """Reset key's TTL. False if the key does not exist."""

    @abstractmethod
    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; -2 if missing, -1 if no expiry."""

    @abstractmethod
    async def ping(self) -> bool:
        """Round-trip connectivity check. May raise on connection errors."""

    async def close(self) -> None:
        """Release backend resources."""

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Backend identifier (redis, memory)."""
