# src/rag/embeddings/base_embedder.py — v2
"""Abstract embeddings interface.

Implementations call a remote provider and do not cache or retry;
EmbeddingResolver adds both on top.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseEmbedder(ABC):
    """Unified interface for all embedding providers."""

    @abstractmethod
    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts; output is order-aligned with input."""

    async def embed_query(self, query: str) -> list[float]:
        """Embed a single text."""
        vectors = await self.embed_texts([query])
        return vectors[0]

    async def aclose(self) -> None:
        """Release network resources."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Output vector dimensions."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier."""
