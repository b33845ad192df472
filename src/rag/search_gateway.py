# src/rag/search_gateway.py — v2
"""Similarity search over the news collection.

A thin, non-retried wrapper: vector index errors propagate unchanged.
Caching of search results is the orchestrator's job, not this class's.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from newsrag.core.errors import InvalidInputError
from newsrag.rag.models import (
    CollectionInfo,
    HealthStatus,
    NewsDocument,
    ScoredPoint,
    SearchHit,
    VectorPoint,
)

if TYPE_CHECKING:
    from newsrag.rag.vector_store.base_vector_store import BaseVectorStore, Distance

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "news_articles"


class SimilaritySearchGateway:
    """Search, initialization and ingestion entry points for one collection.

    Args:
        store: Vector store backend.
        collection: Collection name.
        dimensions: Vector size; must equal the embedder's output size.
        distance: Similarity metric used when creating the collection.
    """

    def __init__(
        self,
        store: BaseVectorStore,
        collection: str = DEFAULT_COLLECTION,
        dimensions: int = 768,
        distance: Distance = "cosine",
    ) -> None:
        self._store = store
        self._collection = collection
        self._dimensions = dimensions
        self._distance = distance

    @property
    def collection(self) -> str:
        return self._collection

    async def close(self) -> None:
        await self._store.close()

    async def initialize(self) -> bool:
        """Ensure the collection exists. Returns True if it was created."""
        if await self._store.collection_exists(self._collection):
            logger.info("Collection %s already exists", self._collection)
            return False
        await self._store.create_collection(self._collection, self._dimensions, self._distance)
        logger.info("Created collection: %s", self._collection)
        return True

    async def search(self, vector: Sequence[float], limit: int = 5) -> list[SearchHit]:
        """Nearest documents, best match first."""
        if limit < 1:
            raise InvalidInputError("search limit must be >= 1")
        if len(vector) != self._dimensions:
            raise InvalidInputError(
                f"query vector has {len(vector)} dimensions, collection expects {self._dimensions}"
            )

        points = await self._store.query(self._collection, list(vector), limit)
        hits = [_to_hit(p) for p in points]
        logger.debug(
            "Found %d similar documents (top scores: %s)",
            len(hits), [round(h.score, 3) for h in hits[:3]],
        )
        return hits

    async def index_documents(self, documents: Sequence[NewsDocument]) -> int:
        """Upsert embedded documents; returns how many were written."""
        if not documents:
            return 0
        points = []
        for doc in documents:
            if len(doc.embedding) != self._dimensions:
                raise InvalidInputError(
                    f"document {doc.id!r} has {len(doc.embedding)} dimensions, "
                    f"collection expects {self._dimensions}"
                )
            points.append(VectorPoint(id=doc.id, vector=doc.embedding, payload=doc.payload()))
        await self._store.upsert(self._collection, points)
        logger.info("Stored %d documents in %s", len(points), self._collection)
        return len(points)

    async def count(self) -> int:
        """Number of indexed documents."""
        return await self._store.count(self._collection)

    async def collection_info(self) -> CollectionInfo:
        """Collection statistics; zeros with status "unknown" if unavailable."""
        try:
            return await self._store.collection_info(self._collection)
        except Exception as e:
            logger.warning("Could not read collection info for %s: %s", self._collection, e)
            return CollectionInfo()

    async def health_check(self) -> HealthStatus:
        try:
            collections = await self._store.list_collections()
        except Exception as e:
            logger.error("Vector DB health check failed: %s", e)
            return HealthStatus(status="unhealthy", detail=str(e))
        return HealthStatus(status="healthy", detail=f"{len(collections)} collections")


def _to_hit(point: ScoredPoint) -> SearchHit:
    payload = point.payload
    return SearchHit(
        document_id=point.id,
        score=point.score,
        title=payload.get("title") or "",
        content=payload.get("content") or "",
        url=payload.get("url"),
        published_at=payload.get("publishedAt"),
        source=payload.get("source"),
        summary=payload.get("summary"),
    )
