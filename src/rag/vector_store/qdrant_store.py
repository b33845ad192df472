# src/rag/vector_store/qdrant_store.py — v4
"""Qdrant vector store adapter.

Uses the asyncio client of qdrant-client for remote, local or in-memory
storage. Requires: pip install qdrant-client.

Qdrant only accepts unsigned integers or UUIDs as point ids: other string
ids are mapped to a deterministic UUIDv5 and the original id is kept in
the payload under "document_id".
"""

from __future__ import annotations

import logging
import uuid

from newsrag.rag.models import CollectionInfo, ScoredPoint, VectorPoint
from newsrag.rag.vector_store.base_vector_store import BaseVectorStore, Distance

logger = logging.getLogger(__name__)

_DISTANCES = {"cosine": "COSINE", "dot": "DOT", "euclid": "EUCLID"}


class QdrantStore(BaseVectorStore):
    """Vector store backed by Qdrant."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        path: str | None = None,
        client: object | None = None,
    ) -> None:
        if client is not None:
            self._client = client
            return
        try:
            from qdrant_client import AsyncQdrantClient
        except ImportError as e:
            raise ImportError(
                "qdrant-client package required: pip install qdrant-client"
            ) from e

        if url:
            self._client = AsyncQdrantClient(url=url, api_key=api_key)
        elif path:
            self._client = AsyncQdrantClient(path=path)
        else:
            self._client = AsyncQdrantClient(location=":memory:")

    async def create_collection(
        self, collection: str, dimensions: int, distance: Distance = "cosine"
    ) -> None:
        """Create a collection; existing collections are left untouched."""
        from qdrant_client.models import Distance as QdrantDistance
        from qdrant_client.models import VectorParams

        if await self._client.collection_exists(collection):
            return
        await self._client.create_collection(
            collection_name=collection,
            vectors_config=VectorParams(
                size=dimensions, distance=getattr(QdrantDistance, _DISTANCES[distance])
            ),
        )
        logger.info("Created collection %s (%d dims, %s)", collection, dimensions, distance)

    async def collection_exists(self, collection: str) -> bool:
        return await self._client.collection_exists(collection)

    async def list_collections(self) -> list[str]:
        response = await self._client.get_collections()
        return [c.name for c in response.collections]

    async def upsert(self, collection: str, points: list[VectorPoint]) -> None:
        """Insert or update points, waiting for the write to be applied."""
        from qdrant_client.models import PointStruct

        structs = []
        for point in points:
            payload = dict(point.payload)
            payload.setdefault("document_id", point.id)
            structs.append(
                PointStruct(id=to_point_id(point.id), vector=point.vector, payload=payload)
            )
        await self._client.upsert(collection_name=collection, points=structs, wait=True)

    async def query(
        self, collection: str, vector: list[float], limit: int = 5
    ) -> list[ScoredPoint]:
        """Query by embedding similarity via query_points()."""
        response = await self._client.query_points(
            collection_name=collection,
            query=vector,
            limit=limit,
            with_payload=True,
        )
        results: list[ScoredPoint] = []
        for hit in response.points:
            payload = hit.payload or {}
            results.append(
                ScoredPoint(
                    id=payload.get("document_id", hit.id),
                    score=float(hit.score) if hit.score is not None else 0.0,
                    payload=payload,
                )
            )
        return results

    async def collection_info(self, collection: str) -> CollectionInfo:
        info = await self._client.get_collection(collection)
        status = getattr(info, "status", None)
        return CollectionInfo(
            points_count=info.points_count or 0,
            vectors_count=getattr(info, "vectors_count", None) or info.points_count or 0,
            status=str(getattr(status, "value", status) or "unknown"),
        )

    async def close(self) -> None:
        await self._client.close()

    @property
    def provider_name(self) -> str:
        return "qdrant"


def to_point_id(doc_id: str | int) -> str | int:
    """Map an arbitrary document id to a Qdrant-compatible point id."""
    if isinstance(doc_id, int) and doc_id >= 0:
        return doc_id
    text = str(doc_id)
    try:
        return str(uuid.UUID(text))
    except ValueError:
        return str(uuid.uuid5(uuid.NAMESPACE_URL, text))
