# tests/unit/rag/test_query_pipeline.py — v2
"""Tests for rag/query_pipeline.py — three-tier cached RAG.

Covers the four caller-visible outcomes (answer, no-information answer,
apologetic answer, propagated error) and the write-through and replay
guarantees of the orchestrator.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from newsrag.cache.content_cache import ContentCache
from newsrag.cache.keys import query_key
from newsrag.core.errors import InvalidInputError, RetryExhaustedError
from newsrag.llm.answer_generator import FALLBACK_ANSWER, AnswerGenerator
from newsrag.rag.embeddings.resolver import EmbeddingResolver
from newsrag.rag.query_pipeline import NO_RESULTS_ANSWER, QueryOrchestrator


class TokenRecorder:
    def __init__(self) -> None:
        self.tokens: list[str] = []

    def __call__(self, token: str) -> None:
        self.tokens.append(token)

    @property
    def text(self) -> str:
        return "".join(self.tokens)


class TestAnswerOutcome:
    @pytest.mark.asyncio
    async def test_sources_in_score_order(self, orchestrator):
        result = await orchestrator.process_query("What's happening in technology?")
        assert result.answer == "Markets rallied on Tuesday [1]."
        assert [s.relevance_score for s in result.sources] == [0.91, 0.85, 0.80]
        assert [s.title for s in result.sources] == ["Stocks climb", "Central bank holds", "Oil slips"]
        assert result.sources[0].url == "https://news.example/a1"
        assert result.sources[0].published_at == "2026-10-13T08:00:00Z"
        assert result.retrieved_doc_count == 3

    @pytest.mark.asyncio
    async def test_prompt_carries_ranked_context(self, orchestrator, fake_llm):
        await orchestrator.process_query("markets?")
        prompt = fake_llm.prompts[0]
        assert prompt.index("[1] Stocks climb") < prompt.index("[2] Central bank holds")
        assert prompt.index("[2] Central bank holds") < prompt.index("[3] Oil slips")
        assert "User Question: markets?" in prompt

    @pytest.mark.asyncio
    async def test_search_limit_default_five(self, orchestrator, fake_vector_store):
        await orchestrator.process_query("q")
        assert fake_vector_store.queries[0][2] == 5

    @pytest.mark.asyncio
    async def test_streamed_tokens_equal_answer(self, orchestrator):
        sink = TokenRecorder()
        result = await orchestrator.process_query("q", sink)
        assert sink.text == result.answer
        assert sink.tokens[0] == "Markets "


class TestWriteThrough:
    @pytest.mark.asyncio
    async def test_second_call_touches_nothing_remote(
        self, orchestrator, fake_embedder, fake_vector_store, fake_llm
    ):
        first = await orchestrator.process_query("latest tech news")

        resolve = AsyncMock(wraps=orchestrator.resolver.resolve)
        orchestrator.resolver.resolve = resolve
        sink = TokenRecorder()
        second = await orchestrator.process_query("latest tech news", sink)

        assert second == first
        resolve.assert_not_awaited()
        assert fake_embedder.call_count == 1
        assert len(fake_vector_store.queries) == 1
        assert len(fake_llm.prompts) == 1
        assert sink.text == first.answer

    @pytest.mark.asyncio
    async def test_result_cached_with_query_ttl(self, orchestrator, memory_store):
        await orchestrator.process_query("q")
        assert await memory_store.ttl(query_key("q")) == 3_600

    @pytest.mark.asyncio
    async def test_search_cache_reused_across_queries(
        self, orchestrator, content_cache, fake_vector_store
    ):
        await orchestrator.process_query("q")
        await content_cache.clear("queries")
        await orchestrator.process_query("q")
        assert len(fake_vector_store.queries) == 1

    @pytest.mark.asyncio
    async def test_cache_outage_is_invisible(
        self, gateway, generator, fake_embedder, fake_vector_store, no_wait_retry
    ):
        store = AsyncMock()
        for name in ("get", "set", "mget"):
            getattr(store, name).side_effect = ConnectionError("redis down")
        cache = ContentCache(store)
        resolver = EmbeddingResolver(fake_embedder, cache, no_wait_retry)
        orchestrator = QueryOrchestrator(cache, resolver, gateway, generator)

        result = await orchestrator.process_query("q")
        assert len(result.sources) == 3
        await orchestrator.process_query("q")
        assert fake_embedder.call_count == 2
        assert len(fake_vector_store.queries) == 2


class TestNoInformationOutcome:
    @pytest.mark.asyncio
    async def test_empty_hits(self, orchestrator, fake_vector_store, fake_llm, memory_store):
        fake_vector_store.results = []
        sink = TokenRecorder()
        result = await orchestrator.process_query("obscure topic", sink)
        assert result.answer == NO_RESULTS_ANSWER
        assert result.sources == []
        assert result.retrieved_doc_count == 0
        assert fake_llm.prompts == []
        assert sink.text == NO_RESULTS_ANSWER

    @pytest.mark.asyncio
    async def test_empty_result_short_ttl(self, orchestrator, fake_vector_store, memory_store):
        fake_vector_store.results = []
        await orchestrator.process_query("obscure topic")
        ttl = await memory_store.ttl(query_key("obscure topic"))
        assert 0 < ttl < orchestrator.cache.ttls.query_s
        assert ttl == 1_800

    @pytest.mark.asyncio
    async def test_empty_result_self_heals(self, orchestrator, fake_vector_store, seeded_points, clock):
        fake_vector_store.results = []
        await orchestrator.process_query("q")
        fake_vector_store.results = seeded_points
        clock.advance(1_801)
        result = await orchestrator.process_query("q")
        assert len(result.sources) == 3


class TestApologeticOutcome:
    @pytest.mark.asyncio
    async def test_generation_failure_falls_back(self, orchestrator, fake_llm, memory_store):
        fake_llm.error = TimeoutError("gemini timeout")
        sink = TokenRecorder()
        result = await orchestrator.process_query("q", sink)
        assert result.answer == FALLBACK_ANSWER
        assert [s.relevance_score for s in result.sources] == [0.91, 0.85, 0.80]
        assert sink.text == FALLBACK_ANSWER
        assert await memory_store.ttl(query_key("q")) == 1_800

    @pytest.mark.asyncio
    async def test_broken_stream_replays_same_text_on_hit(
        self, content_cache, resolver, gateway, fake_llm, memory_store
    ):
        fake_llm.chunks = ["Rates ", "held"]
        fake_llm.fail_after_chunks = 1
        orchestrator = QueryOrchestrator(
            content_cache, resolver, gateway, AnswerGenerator(fake_llm, stream_natively=True)
        )
        first_sink = TokenRecorder()
        first = await orchestrator.process_query("q", first_sink)
        assert first_sink.text == first.answer
        assert first.answer.startswith("Rates ")
        assert first.answer.endswith(FALLBACK_ANSWER)
        assert await memory_store.ttl(query_key("q")) == 1_800

        second_sink = TokenRecorder()
        second = await orchestrator.process_query("q", second_sink)
        assert second == first
        assert second_sink.text == first_sink.text

    @pytest.mark.asyncio
    async def test_answer_matching_fallback_text_gets_full_ttl(self, orchestrator, fake_llm, memory_store):
        fake_llm.answer = FALLBACK_ANSWER
        await orchestrator.process_query("q")
        assert await memory_store.ttl(query_key("q")) == 3_600


class TestPropagatedErrorOutcome:
    @pytest.mark.asyncio
    async def test_embedding_exhaustion(self, orchestrator, fake_embedder, fake_llm, memory_store):
        fake_embedder.fail_times = 3
        with pytest.raises(RetryExhaustedError):
            await orchestrator.process_query("q")
        assert fake_llm.prompts == []
        assert await memory_store.get(query_key("q")) is None

    @pytest.mark.asyncio
    async def test_search_failure(self, orchestrator, fake_vector_store, memory_store):
        fake_vector_store.error = ConnectionError("qdrant unreachable")
        with pytest.raises(ConnectionError):
            await orchestrator.process_query("q")
        assert await memory_store.get(query_key("q")) is None

    @pytest.mark.asyncio
    async def test_blank_query_rejected_first(self, orchestrator, fake_embedder):
        with pytest.raises(InvalidInputError):
            await orchestrator.process_query("  ")
        assert fake_embedder.call_count == 0


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_identical_queries_not_coalesced(self, orchestrator, fake_embedder):
        results = await asyncio.gather(
            orchestrator.process_query("same"), orchestrator.process_query("same")
        )
        assert results[0] == results[1]
        assert fake_embedder.call_count == 2

    def test_rejects_bad_limit(self, content_cache, resolver, gateway, generator):
        with pytest.raises(ValueError):
            QueryOrchestrator(content_cache, resolver, gateway, generator, search_limit=0)
