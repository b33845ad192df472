# src/cache/cache_factory.py — v3
"""Factory for cache store instantiation."""

from __future__ import annotations

import logging

from newsrag.cache.base_cache_store import BaseCacheStore
from newsrag.config.settings import Settings
from newsrag.core.errors import UnsupportedBackendError

logger = logging.getLogger(__name__)


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.cache_backend

    if backend == "memory":
        from newsrag.cache.memory_store import MemoryCacheStore
        return MemoryCacheStore()

    if backend == "redis":
        from newsrag.cache.redis_store import RedisCacheStore
        if settings is None or not settings.redis_url:
            raise ValueError("REDIS_URL must be set when CACHE_BACKEND=redis")
        logger.debug("Creating Redis cache store")
        return RedisCacheStore(redis_url=settings.redis_url)

    raise UnsupportedBackendError(f"Unsupported cache backend: {backend!r}")
