# tests/conftest.py — v2
"""Shared test fixtures for all unit tests.

Provides a memory cache store on a controllable clock, and fakes for the
embedding provider, the vector index and the LLM, plus seeded search hits.
No external dependencies — all I/O stays in-process.
"""

from __future__ import annotations

import asyncio
import hashlib
from typing import AsyncIterator

import pytest

from newsrag.cache.content_cache import ContentCache
from newsrag.cache.memory_store import MemoryCacheStore
from newsrag.core.errors import EmbeddingError
from newsrag.core.retry import RetryConfig
from newsrag.llm.answer_generator import AnswerGenerator
from newsrag.llm.base_client import BaseLLMClient
from newsrag.llm.models import GenerationConfig, LLMResponse
from newsrag.rag.embeddings.base_embedder import BaseEmbedder
from newsrag.rag.embeddings.resolver import EmbeddingResolver
from newsrag.rag.models import CollectionInfo, ScoredPoint, SearchHit, VectorPoint
from newsrag.rag.query_pipeline import QueryOrchestrator
from newsrag.rag.search_gateway import SimilaritySearchGateway
from newsrag.rag.vector_store.base_vector_store import BaseVectorStore
from newsrag.session.conversation_store import ConversationStore

DIMS = 4


# === FAKES ===


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEmbedder(BaseEmbedder):
    """Deterministic embedder counting remote calls.

    fail_times: number of leading calls that raise EmbeddingError.
    """

    def __init__(self, dimensions: int = DIMS, fail_times: int = 0) -> None:
        self._dimensions = dimensions
        self.fail_times = fail_times
        self.calls: list[list[str]] = []
        self.closed = False

    async def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        await asyncio.sleep(0)
        if self.fail_times > 0:
            self.fail_times -= 1
            raise EmbeddingError("Jina API error: 503 Service Unavailable", status_code=503)
        return [self.vector_for(t) for t in texts]

    def vector_for(self, text: str) -> list[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [round(b / 255, 6) for b in digest[: self._dimensions]]

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return "fake-embed"


class FakeVectorStore(BaseVectorStore):
    """Vector index returning preset scored points, best first."""

    def __init__(self, results: list[ScoredPoint] | None = None) -> None:
        self.results = list(results or [])
        self.collections: dict[str, int] = {}
        self.upserted: list[VectorPoint] = []
        self.queries: list[tuple[str, list[float], int]] = []
        self.error: Exception | None = None
        self.closed = False

    async def create_collection(self, collection, dimensions, distance="cosine"):
        self.collections.setdefault(collection, dimensions)

    async def collection_exists(self, collection):
        return collection in self.collections

    async def list_collections(self):
        if self.error is not None:
            raise self.error
        return list(self.collections)

    async def upsert(self, collection, points):
        self.upserted.extend(points)

    async def query(self, collection, vector, limit=5):
        self.queries.append((collection, list(vector), limit))
        if self.error is not None:
            raise self.error
        return self.results[:limit]

    async def collection_info(self, collection):
        if self.error is not None:
            raise self.error
        return CollectionInfo(points_count=len(self.upserted), status="green")

    async def close(self):
        self.closed = True

    @property
    def provider_name(self) -> str:
        return "fake"


class FakeLLMClient(BaseLLMClient):
    """LLM returning a fixed answer; set error to make every call fail."""

    def __init__(self, answer: str = "Markets rallied on Tuesday [1].") -> None:
        self.answer = answer
        self.error: Exception | None = None
        self.prompts: list[str] = []
        self.chunks: list[str] | None = None
        self.fail_after_chunks: int | None = None

    async def complete(self, prompt: str, config: GenerationConfig) -> LLMResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.answer, model="fake-llm", provider="fake")

    async def stream(self, prompt: str, config: GenerationConfig) -> AsyncIterator[str]:
        self.prompts.append(prompt)
        for i, chunk in enumerate(self.chunks or [self.answer]):
            if self.fail_after_chunks is not None and i >= self.fail_after_chunks:
                raise RuntimeError("stream interrupted")
            yield chunk

    @property
    def supports_streaming(self) -> bool:
        return self.chunks is not None

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def model_name(self) -> str:
        return "fake-llm"


# === FIXTURES: Sample data ===


@pytest.fixture
def seeded_points() -> list[ScoredPoint]:
    """Three articles as the vector index returns them (scores descending)."""
    return [
        ScoredPoint(
            id="a1",
            score=0.91,
            payload={
                "title": "Stocks climb",
                "content": "Equities rose sharply on Tuesday. " * 20,
                "url": "https://news.example/a1",
                "publishedAt": "2026-10-13T08:00:00Z",
                "source": "Reuters",
                "summary": "Markets rallied on Tuesday.",
            },
        ),
        ScoredPoint(
            id="a2",
            score=0.85,
            payload={
                "title": "Central bank holds",
                "content": "The central bank kept rates unchanged.",
                "url": "https://news.example/a2",
                "source": "AP",
            },
        ),
        ScoredPoint(
            id="a3",
            score=0.80,
            payload={"title": "Oil slips", "content": "Brent fell 2%."},
        ),
    ]


@pytest.fixture
def seeded_hits(seeded_points) -> list[SearchHit]:
    return [
        SearchHit(
            document_id=p.id,
            score=p.score,
            title=p.payload.get("title", ""),
            content=p.payload.get("content", ""),
            url=p.payload.get("url"),
            published_at=p.payload.get("publishedAt"),
            source=p.payload.get("source"),
            summary=p.payload.get("summary"),
        )
        for p in seeded_points
    ]


# === FIXTURES: Components ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def content_cache(memory_store) -> ContentCache:
    return ContentCache(memory_store)


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def fake_vector_store(seeded_points) -> FakeVectorStore:
    store = FakeVectorStore(seeded_points)
    store.collections["news_articles"] = DIMS
    return store


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def no_wait_retry() -> RetryConfig:
    return RetryConfig(max_attempts=3, base_delay_s=0.0)


@pytest.fixture
def resolver(fake_embedder, content_cache, no_wait_retry) -> EmbeddingResolver:
    return EmbeddingResolver(fake_embedder, content_cache, retry_config=no_wait_retry)


@pytest.fixture
def gateway(fake_vector_store) -> SimilaritySearchGateway:
    return SimilaritySearchGateway(fake_vector_store, dimensions=DIMS)


@pytest.fixture
def generator(fake_llm) -> AnswerGenerator:
    return AnswerGenerator(fake_llm)


@pytest.fixture
def orchestrator(content_cache, resolver, gateway, generator) -> QueryOrchestrator:
    return QueryOrchestrator(content_cache, resolver, gateway, generator)


@pytest.fixture
def conversations(memory_store) -> ConversationStore:
    return ConversationStore(memory_store, ttl_s=3_600)
