# src/rag/embeddings/openai_embedder.py — v3
"""OpenAI embeddings for news queries and articles.

text-embedding-3 models accept a ``dimensions`` argument, so vectors are
requested at the collection's size (768 by default) instead of the model's
native width. SDK failures surface as EmbeddingError so the resolver's
retry policy treats every provider alike.
"""

from __future__ import annotations

import logging
from typing import Any

from newsrag.core.errors import EmbeddingError
from newsrag.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class OpenAIEmbedder(BaseEmbedder):
    """Batch embeddings through ``openai.AsyncOpenAI``.

    Args:
        model: Embedding model id.
        api_key: OpenAI key; the SDK falls back to OPENAI_API_KEY when empty.
        dimensions: Output size, must match the vector collection.
        client: Pre-built AsyncOpenAI client (tests, shared pools).
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        dimensions: int = 768,
        client: Any | None = None,
    ) -> None:
        self._model = model
        self._api_key = api_key or None
        self._dimensions = dimensions
        self._sdk_client = client

    def _get_client(self) -> Any:
        if self._sdk_client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError as e:
                raise ImportError(
                    "openai package required: pip install openai"
                ) from e
            self._sdk_client = AsyncOpenAI(api_key=self._api_key)
        return self._sdk_client

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        client = self._get_client()
        try:
            response = await client.embeddings.create(
                input=texts, model=self._model, dimensions=self._dimensions
            )
        except Exception as e:
            raise EmbeddingError(
                f"OpenAI embeddings error: {e}",
                status_code=getattr(e, "status_code", None),
            ) from e

        items = response.data
        if len(items) != len(texts):
            raise EmbeddingError(
                f"OpenAI returned {len(items)} embeddings for {len(texts)} inputs"
            )
        items = sorted(items, key=lambda item: item.index)
        logger.debug("OpenAI embedded %d texts with %s", len(texts), self._model)
        return [list(item.embedding) for item in items]

    async def aclose(self) -> None:
        if self._sdk_client is not None:
            await self._sdk_client.close()

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model
