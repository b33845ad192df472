# src/cache/models.py — v2
"""Cache domain models: namespaces, CacheEntry, CacheStats, CacheTTLs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

if TYPE_CHECKING:
    from newsrag.config.settings import Settings


class CacheNamespace(str, Enum):
    """Content-addressed cache namespaces. The value is the key prefix."""

    EMBEDDING = "embedding:"
    QUERY = "query:"
    SEARCH = "search:"

    @property
    def prefix(self) -> str:
        return self.value


SESSION_PREFIX = "session:"
CHAT_HISTORY_PREFIX = "chat:"

# Operator-facing names accepted by ContentCache.clear().
CLEAR_TYPES: dict[str, tuple[CacheNamespace, ...]] = {
    "embeddings": (CacheNamespace.EMBEDDING,),
    "queries": (CacheNamespace.QUERY,),
    "searches": (CacheNamespace.SEARCH,),
    "all": (CacheNamespace.EMBEDDING, CacheNamespace.QUERY, CacheNamespace.SEARCH),
}


class CacheEntry(BaseModel):
    """Single stored value with its absolute expiry (None = persistent)."""

    key: str
    value: Any
    expires_at: datetime | None = None


class CacheStats(BaseModel):
    """Key counts per namespace."""

    total_keys: int = 0
    embeddings: int = 0
    queries: int = 0
    searches: int = 0
    sessions: int = 0
    chat_history: int = 0


@dataclass(frozen=True)
class CacheTTLs:
    """Per-namespace TTL policy, in seconds."""

    embedding_s: int = 86_400
    query_s: int = 3_600
    empty_result_s: int = 1_800
    search_s: int = 1_800

    def for_namespace(self, namespace: CacheNamespace) -> int:
        if namespace is CacheNamespace.EMBEDDING:
            return self.embedding_s
        if namespace is CacheNamespace.QUERY:
            return self.query_s
        return self.search_s

    @classmethod
    def from_settings(cls, settings: Settings) -> CacheTTLs:
        return cls(
            embedding_s=settings.cache_embedding_ttl_s,
            query_s=settings.cache_query_ttl_s,
            empty_result_s=settings.cache_empty_result_ttl_s,
            search_s=settings.cache_search_ttl_s,
        )
