# src/rag/embeddings/resolver.py — v1
"""Cache-aside embedding resolution with bounded retry.

resolve()        one text: cache lookup, then one remote call on miss.
resolve_batch()  many texts: one MGET, one remote call for all misses,
                 individual write-back, output re-assembled in input order.
warm()           resolve_batch() for its side effect on the cache.

Remote failures are retried (linear backoff) and, once the budget is
spent, propagate as RetryExhaustedError: the pipeline cannot continue
without a vector.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Sequence

from newsrag.core.errors import EmbeddingError, InvalidInputError
from newsrag.core.retry import RetryConfig, with_retry
from newsrag.rag.models import HealthStatus

if TYPE_CHECKING:
    from newsrag.cache.content_cache import ContentCache
    from newsrag.rag.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)

HEALTH_PROBE_TEXT = "test"


class EmbeddingResolver:
    """Embedding lookup that consults the content cache before the provider.

    Args:
        embedder: Remote embedding provider.
        cache: Content-addressed cache (embedding namespace).
        retry_config: Attempt budget for provider calls.
    """

    def __init__(
        self,
        embedder: BaseEmbedder,
        cache: ContentCache,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self._embedder = embedder
        self._cache = cache
        self._retry_config = retry_config or RetryConfig()

    @property
    def dimensions(self) -> int:
        return self._embedder.dimensions

    async def aclose(self) -> None:
        await self._embedder.aclose()

    async def resolve(self, text: str) -> list[float]:
        """Vector for one text."""
        _check_text(text)

        cached = await self._cache.get_embedding(text)
        if cached is not None:
            logger.debug("Embedding cache hit")
            return cached

        logger.debug("Embedding cache miss, calling %s", self._embedder.provider_name)
        vectors = await with_retry(
            self._embed, [text],
            operation=f"{self._embedder.provider_name} embedding",
            config=self._retry_config,
        )
        embedding = vectors[0]
        await self._cache.set_embedding(text, embedding)
        return embedding

    async def resolve_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Vectors for many texts, aligned with input order.

        Identical texts inside one batch are sent to the provider once.
        """
        texts = list(texts)
        if not texts:
            return []
        for text in texts:
            _check_text(text)

        results: list[list[float] | None] = list(await self._cache.get_embeddings(texts))

        # text -> every input position waiting for it; dict keeps first-seen order
        pending: dict[str, list[int]] = {}
        for index, (text, vector) in enumerate(zip(texts, results)):
            if vector is None:
                pending.setdefault(text, []).append(index)

        logger.info(
            "Batch embeddings: %d hits, %d misses (%d unique)",
            len(texts) - sum(len(v) for v in pending.values()),
            sum(len(v) for v in pending.values()),
            len(pending),
        )
        if not pending:
            return results  # type: ignore[return-value]

        miss_texts = list(pending)
        vectors = await with_retry(
            self._embed, miss_texts,
            operation=f"{self._embedder.provider_name} batch embedding",
            config=self._retry_config,
        )

        for text, vector in zip(miss_texts, vectors):
            for index in pending[text]:
                results[index] = vector

        await asyncio.gather(
            *(self._cache.set_embedding(text, vector) for text, vector in zip(miss_texts, vectors))
        )
        return results  # type: ignore[return-value]

    async def warm(self, texts: Sequence[str]) -> int:
        """Pre-populate the cache; returns how many texts were requested."""
        logger.info("Warming embedding cache for %d texts", len(texts))
        await self.resolve_batch(texts)
        return len(texts)

    async def health_check(self) -> HealthStatus:
        """Embed a sample text directly against the provider (no cache, no retry)."""
        try:
            await self._embed([HEALTH_PROBE_TEXT])
        except Exception as e:
            logger.error("Embedding provider is unhealthy: %s", e)
            return HealthStatus(status="unhealthy", detail=str(e))
        return HealthStatus(status="healthy")

    async def _embed(self, texts: list[str]) -> list[list[float]]:
        vectors = await self._embedder.embed_texts(texts)
        if len(vectors) != len(texts):
            raise EmbeddingError(
                f"Provider returned {len(vectors)} embeddings for {len(texts)} inputs"
            )
        return [list(v) for v in vectors]


def _check_text(text: str) -> None:
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError("text to embed must be a non-empty string")
