# src/rag/embeddings/jina_embedder.py — v1
"""Jina AI embedding adapter.

POST {model, input: [texts]} with bearer auth; the response carries one
vector per input. Any non-2xx status is a hard failure (retried upstream
by EmbeddingResolver).
Models: jina-embeddings-v2-base-en (768 dims).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from newsrag.core.errors import EmbeddingError
from newsrag.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)

JINA_API_URL = "https://api.jina.ai/v1/embeddings"


class JinaEmbedder(BaseEmbedder):
    """Embeddings via the Jina REST API."""

    def __init__(
        self,
        model: str = "jina-embeddings-v2-base-en",
        api_key: str | None = None,
        dimensions: int = 768,
        api_url: str = JINA_API_URL,
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model = model
        self._api_key = api_key or ""
        self._dimensions = dimensions
        self._api_url = api_url
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in one request."""
        if not texts:
            return []
        response = await self._client.post(
            self._api_url,
            json={"model": self._model, "input": texts},
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )
        if response.status_code // 100 != 2:
            raise EmbeddingError(
                f"Jina API error: {response.status_code} {response.reason_phrase} - {response.text}",
                status_code=response.status_code,
            )

        try:
            items: list[dict[str, Any]] = response.json()["data"]
        except (ValueError, KeyError, TypeError) as e:
            raise EmbeddingError(f"Malformed Jina response: {e}") from e

        if len(items) != len(texts):
            raise EmbeddingError(
                f"Jina returned {len(items)} embeddings for {len(texts)} inputs"
            )
        if all("index" in item for item in items):
            items = sorted(items, key=lambda item: item["index"])

        logger.debug("Jina embedded %d texts", len(texts))
        return [item["embedding"] for item in items]

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "jina"

    @property
    def model_name(self) -> str:
        return self._model
