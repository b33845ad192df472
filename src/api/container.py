# src/api/container.py — v1
"""Composition root: build a ChatService from Settings.

The cache store is shared by the content cache and the conversation store;
their key prefixes never overlap.
"""

from __future__ import annotations

import logging

from newsrag.api.facade import ChatService
from newsrag.cache.cache_factory import create_cache_store
from newsrag.cache.content_cache import ContentCache
from newsrag.cache.models import CacheTTLs
from newsrag.config.settings import Settings
from newsrag.core.retry import RetryConfig
from newsrag.events.bus import MessageBus
from newsrag.llm.answer_generator import AnswerGenerator
from newsrag.llm.client_factory import create_llm_client
from newsrag.llm.models import GenerationConfig
from newsrag.rag.context_assembler import ContextAssembler
from newsrag.rag.embeddings.embedder_factory import create_embedder
from newsrag.rag.embeddings.resolver import EmbeddingResolver
from newsrag.rag.query_pipeline import QueryOrchestrator
from newsrag.rag.search_gateway import SimilaritySearchGateway
from newsrag.rag.vector_store.vector_store_factory import create_vector_store
from newsrag.session.conversation_store import ConversationStore

logger = logging.getLogger(__name__)


def build_service(settings: Settings | None = None, bus: MessageBus | None = None) -> ChatService:
    """Wire every component from configuration. No network I/O happens here."""
    settings = settings or Settings()

    store = create_cache_store(settings)
    cache = ContentCache(
        store,
        ttls=CacheTTLs.from_settings(settings),
        hash_length=settings.cache_key_hash_length,
        vector_precision=settings.cache_vector_precision,
    )

    resolver = EmbeddingResolver(
        create_embedder(settings),
        cache,
        retry_config=RetryConfig(
            max_attempts=settings.embedding_retry_attempts,
            base_delay_s=settings.embedding_retry_delay_s,
        ),
    )

    gateway = SimilaritySearchGateway(
        create_vector_store(settings),
        collection=settings.vector_db_collection,
        dimensions=settings.embedding_dimensions,
        distance=settings.vector_db_distance,
    )

    generator = AnswerGenerator(
        create_llm_client(settings),
        config=GenerationConfig.from_settings(settings),
        token_delay_s=settings.stream_token_delay_s,
        stream_natively=settings.llm_stream_natively,
    )

    orchestrator = QueryOrchestrator(
        cache,
        resolver,
        gateway,
        generator,
        search_limit=settings.rag_search_limit,
        assembler=ContextAssembler(excerpt_chars=settings.rag_content_excerpt_chars),
        token_delay_s=settings.stream_token_delay_s,
    )

    logger.debug(
        "Built chat service: cache=%s, embeddings=%s, llm=%s",
        settings.cache_backend, settings.embedding_provider, settings.llm_provider,
    )
    return ChatService(
        orchestrator,
        ConversationStore(store, ttl_s=settings.session_ttl_s),
        bus=bus,
    )
