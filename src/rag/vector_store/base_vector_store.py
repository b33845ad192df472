# src/rag/vector_store/base_vector_store.py — v2
"""Abstract vector store interface.

Mirrors the remote index contract: ensure a collection, upsert points,
search by vector (best match first). No caching or retry at this level.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

from newsrag.rag.models import CollectionInfo, ScoredPoint, VectorPoint

Distance = Literal["cosine", "dot", "euclid"]


class BaseVectorStore(ABC):
    """Unified interface for vector store backends."""

    @abstractmethod
    async def create_collection(
        self, collection: str, dimensions: int, distance: Distance = "cosine"
    ) -> None:
        """Create a named collection with specified vector dimensions."""

    @abstractmethod
    async def collection_exists(self, collection: str) -> bool:
        """Check if a collection exists."""

    @abstractmethod
    async def list_collections(self) -> list[str]:
        """Names of all collections (also used as a reachability check)."""

    @abstractmethod
    async def upsert(self, collection: str, points: list[VectorPoint]) -> None:
        """Insert or update points."""

    @abstractmethod
    async def query(
        self, collection: str, vector: list[float], limit: int = 5
    ) -> list[ScoredPoint]:
        """Nearest points to vector, best match first."""

    @abstractmethod
    async def collection_info(self, collection: str) -> CollectionInfo:
        """Point counts and status of a collection."""

    async def count(self, collection: str) -> int:
        """Return number of points in a collection."""
        return (await self.collection_info(collection)).points_count

    async def close(self) -> None:
        """Release client resources."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (qdrant)."""
