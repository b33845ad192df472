# src/api/models.py — v2
"""API-level models: StatusReport, SearchResponse."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from newsrag.cache.models import CacheStats
from newsrag.rag.models import CollectionInfo, HealthStatus, SearchHit


class StatusReport(BaseModel):
    """Aggregated health of every remote dependency (health command)."""

    cache: HealthStatus
    vector_db: HealthStatus
    embeddings: HealthStatus
    collection: CollectionInfo = Field(default_factory=CollectionInfo)
    cache_stats: CacheStats | None = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def status(self) -> Literal["ok", "degraded"]:
        """Degraded as soon as one dependency is unreachable."""
        if self.cache.healthy and self.vector_db.healthy and self.embeddings.healthy:
            return "ok"
        return "degraded"


class SearchResponse(BaseModel):
    """Uncached similarity search result, as returned by ChatService.search()."""

    query: str
    results: list[SearchHit] = Field(default_factory=list)
