# src/rag/embeddings/ollama_embedder.py — v2
"""Ollama embedding adapter (local inference).

Uses the Ollama REST API (/api/embed, which accepts a list input).
Models: nomic-embed-text, mxbai-embed-large, etc.
"""

from __future__ import annotations

import logging

import httpx

from newsrag.core.errors import EmbeddingError
from newsrag.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class OllamaEmbedder(BaseEmbedder):
    """Local embeddings via Ollama API."""

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        dimensions: int = 768,
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model_name = model
        self._base_url = base_url.rstrip("/")
        self._dimensions = dimensions
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in one /api/embed call."""
        if not texts:
            return []
        response = await self._client.post(
            f"{self._base_url}/api/embed",
            json={"model": self._model_name, "input": texts},
        )
        if response.status_code // 100 != 2:
            raise EmbeddingError(
                f"Ollama error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        embeddings = response.json().get("embeddings", [])
        if len(embeddings) != len(texts):
            raise EmbeddingError(
                f"Ollama returned {len(embeddings)} embeddings for {len(texts)} inputs "
                f"(model {self._model_name})"
            )
        return embeddings

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model_name
