# src/cache/content_cache.py — v1
"""Content-addressed cache over a BaseCacheStore.

Keys are always derived from content (cache/keys.py); values are JSON.
Every operation fails soft: a backend error on read is a miss, a backend
error on write is logged and dropped. Caching is best-effort and must
never fail the request that triggered it.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence, Tuple, Union

from pydantic import BaseModel, ValidationError

from newsrag.cache.base_cache_store import BaseCacheStore
from newsrag.cache.keys import (
    DEFAULT_HASH_LENGTH,
    DEFAULT_VECTOR_PRECISION,
    canonical_search_content,
    canonical_text,
    generate_key,
)
from newsrag.cache.models import (
    CHAT_HISTORY_PREFIX,
    CLEAR_TYPES,
    SESSION_PREFIX,
    CacheNamespace,
    CacheStats,
    CacheTTLs,
)
from newsrag.rag.models import QueryResult, SearchHit

logger = logging.getLogger(__name__)

# Text for embedding/query namespaces, (vector, limit) for the search namespace.
CacheContent = Union[str, Tuple[Sequence[float], int]]


class ContentCache:
    """Namespaced get/set/get_many/clear/stats over content-derived keys.

    Args:
        store: Key/value backend.
        ttls: Per-namespace TTL policy.
        hash_length: Hex chars of the SHA-256 digest kept in keys.
        vector_precision: Decimal places in the canonical vector form.
    """

    def __init__(
        self,
        store: BaseCacheStore,
        ttls: CacheTTLs | None = None,
        hash_length: int = DEFAULT_HASH_LENGTH,
        vector_precision: int = DEFAULT_VECTOR_PRECISION,
    ) -> None:
        self._store = store
        self._ttls = ttls or CacheTTLs()
        self._hash_length = hash_length
        self._vector_precision = vector_precision

    @property
    def ttls(self) -> CacheTTLs:
        return self._ttls

    @property
    def store(self) -> BaseCacheStore:
        return self._store

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def key_for(self, namespace: CacheNamespace, content: CacheContent) -> str:
        """Derive the storage key for content in a namespace."""
        if namespace is CacheNamespace.SEARCH:
            if isinstance(content, str):
                raise TypeError("search namespace expects a (vector, limit) pair")
            vector, limit = content
            canonical = canonical_search_content(vector, limit, self._vector_precision)
        else:
            if not isinstance(content, str):
                raise TypeError(f"{namespace.name.lower()} namespace expects text")
            canonical = canonical_text(content)
        return generate_key(namespace.prefix, canonical, self._hash_length)

    # ------------------------------------------------------------------
    # Generic operations
    # ------------------------------------------------------------------

    async def get(self, namespace: CacheNamespace, content: CacheContent) -> Any | None:
        """Cached value, or None on miss or backend failure."""
        key = self.key_for(namespace, content)
        try:
            raw = await self._store.get(key)
        except Exception as e:
            logger.warning("Cache read failed for %s: %s", key, e)
            return None
        return _decode(key, raw)

    async def set(
        self,
        namespace: CacheNamespace,
        content: CacheContent,
        value: Any,
        ttl_s: int | None = None,
    ) -> None:
        """Store value, replacing any previous one and resetting its TTL."""
        key = self.key_for(namespace, content)
        ttl = ttl_s if ttl_s is not None else self._ttls.for_namespace(namespace)
        try:
            payload = json.dumps(_to_jsonable(value))
            await self._store.set(key, payload, ttl)
        except Exception as e:
            logger.warning("Cache write failed for %s: %s", key, e)

    async def get_many(
        self, namespace: CacheNamespace, contents: Sequence[CacheContent]
    ) -> list[Any | None]:
        """Batched lookup in one round trip, aligned with input order."""
        if not contents:
            return []
        keys = [self.key_for(namespace, c) for c in contents]
        try:
            raws = await self._store.mget(keys)
        except Exception as e:
            logger.warning("Cache batch read failed (%d keys): %s", len(keys), e)
            return [None] * len(keys)
        if len(raws) != len(keys):
            logger.warning("Cache batch read returned %d values for %d keys", len(raws), len(keys))
            return [None] * len(keys)
        return [_decode(k, raw) for k, raw in zip(keys, raws)]

    async def clear(self, kind: str = "all") -> int:
        """Remove cached entries of one kind (embeddings|queries|searches|all).

        Session and chat keys are never touched.
        """
        namespaces = CLEAR_TYPES.get(kind)
        if namespaces is None:
            raise ValueError(
                f"Unknown cache type {kind!r}. Available: {', '.join(CLEAR_TYPES)}"
            )
        removed = 0
        for namespace in namespaces:
            try:
                removed += await self._store.delete_pattern(f"{namespace.prefix}*")
            except Exception as e:
                logger.warning("Cache clear failed for %s: %s", namespace.prefix, e)
        if removed:
            logger.info("Cleared %d keys of type: %s", removed, kind)
        return removed

    async def stats(self) -> CacheStats | None:
        """Key counts per namespace, or None when the backend is unreachable."""
        try:
            keys = await self._store.keys("*")
        except Exception as e:
            logger.warning("Cache stats failed: %s", e)
            return None
        return CacheStats(
            total_keys=len(keys),
            embeddings=sum(k.startswith(CacheNamespace.EMBEDDING.prefix) for k in keys),
            queries=sum(k.startswith(CacheNamespace.QUERY.prefix) for k in keys),
            searches=sum(k.startswith(CacheNamespace.SEARCH.prefix) for k in keys),
            sessions=sum(k.startswith(SESSION_PREFIX) for k in keys),
            chat_history=sum(k.startswith(CHAT_HISTORY_PREFIX) for k in keys),
        )

    async def health_check(self) -> bool:
        try:
            return await self._store.ping()
        except Exception as e:
            logger.error("Cache health check failed: %s", e)
            return False

    # ------------------------------------------------------------------
    # Typed conveniences
    # ------------------------------------------------------------------

    async def get_embedding(self, text: str) -> list[float] | None:
        value = await self.get(CacheNamespace.EMBEDDING, text)
        return _as_vector(value)

    async def set_embedding(self, text: str, embedding: Sequence[float]) -> None:
        await self.set(CacheNamespace.EMBEDDING, text, list(embedding))

    async def get_embeddings(self, texts: Sequence[str]) -> list[list[float] | None]:
        return [_as_vector(v) for v in await self.get_many(CacheNamespace.EMBEDDING, texts)]

    async def get_query_result(self, query: str) -> QueryResult | None:
        value = await self.get(CacheNamespace.QUERY, query)
        if value is None:
            return None
        try:
            return QueryResult.model_validate(value)
        except ValidationError as e:
            logger.warning("Discarding malformed cached query result: %s", e)
            return None

    async def set_query_result(
        self, query: str, result: QueryResult, ttl_s: int | None = None
    ) -> None:
        await self.set(CacheNamespace.QUERY, query, result, ttl_s)

    async def get_search_results(
        self, vector: Sequence[float], limit: int
    ) -> list[SearchHit] | None:
        value = await self.get(CacheNamespace.SEARCH, (vector, limit))
        if value is None:
            return None
        try:
            return [SearchHit.model_validate(item) for item in value]
        except (ValidationError, TypeError) as e:
            logger.warning("Discarding malformed cached search results: %s", e)
            return None

    async def set_search_results(
        self, vector: Sequence[float], limit: int, hits: Sequence[SearchHit]
    ) -> None:
        await self.set(CacheNamespace.SEARCH, (vector, limit), list(hits))


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    return value


def _decode(key: str, raw: str | None) -> Any | None:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning("Corrupt cache entry %s: %s", key, e)
        return None


def _as_vector(value: Any) -> list[float] | None:
    if not isinstance(value, list) or not value:
        return None
    try:
        return [float(x) for x in value]
    except (TypeError, ValueError):
        return None
