# src/rag/models.py — v1
"""RAG domain models: documents, search hits, sources, query results.

Wire names stay camelCase (publishedAt, relevanceScore, retrievedDocs) so
cached payloads and API responses keep one JSON shape; Python code uses
the snake_case field names. Both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe dict using wire (alias) names."""
        return self.model_dump(mode="json", by_alias=True)


class NewsDocument(_WireModel):
    """An ingested article with its embedding, ready to upsert."""

    id: str | int
    title: str
    content: str
    url: str | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")
    source: str | None = None
    summary: str | None = None
    embedding: list[float]

    def payload(self) -> dict[str, Any]:
        """Vector index payload: everything except id and embedding."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id", "embedding"})


class SearchHit(_WireModel):
    """Snapshot of a document as returned by a similarity search."""

    document_id: str | int = Field(alias="id")
    score: float
    title: str = ""
    content: str = ""
    url: str | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")
    source: str | None = None
    summary: str | None = None


class Source(_WireModel):
    """Citation shown next to an answer. relevance_score is the raw search score."""

    title: str
    url: str | None = None
    originating_feed: str | None = Field(default=None, alias="source")
    published_at: str | None = Field(default=None, alias="publishedAt")
    relevance_score: float = Field(alias="relevanceScore")

    @classmethod
    def from_hit(cls, hit: SearchHit) -> Source:
        return cls(
            title=hit.title,
            url=hit.url,
            originating_feed=hit.source,
            published_at=hit.published_at,
            relevance_score=hit.score,
        )


class QueryResult(_WireModel):
    """Final pipeline output. Cached verbatim under the query namespace."""

    answer: str
    sources: list[Source] = Field(default_factory=list)
    retrieved_doc_count: int = Field(default=0, alias="retrievedDocs")


class VectorPoint(BaseModel):
    """Point sent to the vector index."""

    id: str | int
    vector: list[float]
    payload: dict[str, Any] = Field(default_factory=dict)


class ScoredPoint(BaseModel):
    """Point returned by the vector index, best match first."""

    id: str | int
    score: float
    payload: dict[str, Any] = Field(default_factory=dict)


class CollectionInfo(BaseModel):
    """Vector collection statistics."""

    points_count: int = 0
    vectors_count: int = 0
    status: str = "unknown"


class HealthStatus(BaseModel):
    """Reachability report for a remote dependency."""

    status: Literal["healthy", "unhealthy"]
    detail: str | None = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"
