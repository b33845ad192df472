# src/rag/query_pipeline.py — v2
"""Query orchestrator — three-tier cached retrieval-augmented generation.

Per query, one pass:
  1. Full-result lookup (query namespace, keyed by the raw query text).
     Hit → replay the cached answer to the token sink, return it unchanged.
  2. Embed the query (EmbeddingResolver, itself cache-aside).
  3. Search lookup (search namespace, keyed by embedding + limit).
     Miss → SimilaritySearchGateway.search, then write through.
  4. No hits → NO_RESULTS_ANSWER, cached with the shorter empty-result TTL.
  5. Assemble numbered context in rank order.
  6. Generate (never raises; falls back to FALLBACK_ANSWER).
  7. Project hits to sources in rank order.
  8. Write the QueryResult through to the query namespace.

Embedding and search failures propagate to the caller. The orchestrator
holds no state of its own; concurrent identical queries are not coalesced.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from newsrag.core.errors import InvalidInputError
from newsrag.llm.answer_generator import FALLBACK_ANSWER, TokenSink, replay_tokens
from newsrag.logging.context import request_context, set_stage
from newsrag.rag.context_assembler import ContextAssembler
from newsrag.rag.models import QueryResult, SearchHit, Source

if TYPE_CHECKING:
    from newsrag.cache.content_cache import ContentCache
    from newsrag.llm.answer_generator import AnswerGenerator
    from newsrag.rag.embeddings.resolver import EmbeddingResolver
    from newsrag.rag.search_gateway import SimilaritySearchGateway

logger = logging.getLogger(__name__)

__all__ = ["FALLBACK_ANSWER", "NO_RESULTS_ANSWER", "QueryOrchestrator"]

NO_RESULTS_ANSWER = (
    "I couldn't find any relevant information in the news database "
    "to answer your question."
)
DEFAULT_SEARCH_LIMIT = 5


class QueryOrchestrator:
    """Coordinates cache, embeddings, search and generation for one query.

    Args:
        cache: Content-addressed cache (query and search namespaces).
        resolver: Embedding resolver.
        gateway: Similarity search gateway.
        generator: Answer generator.
        search_limit: Hits retrieved per query.
        assembler: Context builder; defaults to 300-char excerpts.
        token_delay_s: Pause between tokens replayed from a cached answer.
    """

    def __init__(
        self,
        cache: ContentCache,
        resolver: EmbeddingResolver,
        gateway: SimilaritySearchGateway,
        generator: AnswerGenerator,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        assembler: ContextAssembler | None = None,
        token_delay_s: float = 0.0,
    ) -> None:
        if search_limit < 1:
            raise ValueError("search_limit must be >= 1")
        self._cache = cache
        self._resolver = resolver
        self._gateway = gateway
        self._generator = generator
        self._search_limit = search_limit
        self._assembler = assembler or ContextAssembler()
        self._token_delay_s = token_delay_s

    @property
    def cache(self) -> ContentCache:
        return self._cache

    @property
    def resolver(self) -> EmbeddingResolver:
        return self._resolver

    @property
    def gateway(self) -> SimilaritySearchGateway:
        return self._gateway

    async def process_query(
        self, query: str, on_token: TokenSink | None = None
    ) -> QueryResult:
        """Answer a question with cited sources.

        Raises:
            InvalidInputError: Blank query (before any cache or remote call).
            RetryExhaustedError: Embedding provider kept failing.
            Exception: Whatever the vector index raised.
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("query must be a non-empty string")

        with request_context(query_id=uuid.uuid4().hex[:12]):
            logger.info("Processing query: %s", query[:120])
            try:
                return await self._run(query, on_token)
            except Exception:
                logger.exception("Error processing query")
                raise

    async def _run(self, query: str, on_token: TokenSink | None) -> QueryResult:
        # 1. Full result
        set_stage("query_cache")
        cached = await self._cache.get_query_result(query)
        if cached is not None:
            logger.info("Cache hit for complete query result")
            if on_token is not None:
                await replay_tokens(cached.answer, on_token, self._token_delay_s)
            return cached

        logger.info("Cache miss - processing new query")

        # 2. Embedding
        set_stage("embed")
        embedding = await self._resolver.resolve(query)

        # 3. Search
        set_stage("search")
        hits = await self._search(embedding)

        # 4. Nothing relevant
        if not hits:
            result = QueryResult(answer=NO_RESULTS_ANSWER, sources=[], retrieved_doc_count=0)
            if on_token is not None:
                await replay_tokens(result.answer, on_token, self._token_delay_s)
            await self._cache.set_query_result(
                query, result, ttl_s=self._cache.ttls.empty_result_s
            )
            return result

        # 5-6. Context and generation
        set_stage("generate")
        context = self._assembler.assemble(hits)
        generated = await self._generator.answer(query, context, on_token)

        # 7-8. Sources and write-through
        set_stage("store")
        result = QueryResult(
            answer=generated.text,
            sources=[Source.from_hit(hit) for hit in hits],
            retrieved_doc_count=len(hits),
        )
        # Fallback answers share the empty-result TTL
        ttl_s = self._cache.ttls.empty_result_s if generated.fell_back else None
        await self._cache.set_query_result(query, result, ttl_s=ttl_s)
        return result

    async def _search(self, embedding: list[float]) -> list[SearchHit]:
        limit = self._search_limit
        cached = await self._cache.get_search_results(embedding, limit)
        if cached is not None:
            logger.info("Cache hit for search results")
            return cached

        logger.info("Cache miss - searching vector database")
        hits = await self._gateway.search(embedding, limit)
        await self._cache.set_search_results(embedding, limit, hits)
        return hits
