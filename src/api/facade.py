# src/api/facade.py — v3
"""Public API facade — single entry point for chat front-ends.

Usage:
    from newsrag.api.container import build_service
    service = build_service(settings)
    reply = await service.send_message(session_id, "What happened today?", on_token=print)

A turn is: record the user message, answer it through the query
orchestrator, record the assistant message with its sources, then publish
AnswerReady. If answering fails the user message stays in the transcript
and the error reaches the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from newsrag.api.models import SearchResponse, StatusReport
from newsrag.core.errors import InvalidInputError
from newsrag.events.bus import ANSWER_READY, AnswerReady, MessageBus
from newsrag.logging.context import request_context
from newsrag.rag.models import HealthStatus
from newsrag.session.models import ChatMessage

if TYPE_CHECKING:
    from newsrag.llm.answer_generator import TokenSink
    from newsrag.rag.query_pipeline import QueryOrchestrator
    from newsrag.session.conversation_store import ConversationStore

logger = logging.getLogger(__name__)


class ChatService:
    """Conversation-aware front door to the query orchestrator.

    Args:
        orchestrator: Answers questions (three-tier cached RAG).
        conversations: Per-session transcripts.
        bus: Receives AnswerReady events; a private bus is created if omitted.
    """

    def __init__(
        self,
        orchestrator: QueryOrchestrator,
        conversations: ConversationStore,
        bus: MessageBus | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._conversations = conversations
        self._bus = bus or MessageBus()

    @property
    def bus(self) -> MessageBus:
        return self._bus

    @property
    def orchestrator(self) -> QueryOrchestrator:
        return self._orchestrator

    @property
    def conversations(self) -> ConversationStore:
        return self._conversations

    async def create_session(self, session_id: str | None = None) -> str:
        return await self._conversations.create_session(session_id)

    async def history(self, session_id: str) -> list[ChatMessage]:
        return await self._conversations.history(session_id)

    async def clear_history(self, session_id: str) -> bool:
        return await self._conversations.clear(session_id)

    async def send_message(
        self,
        session_id: str,
        text: str,
        on_token: TokenSink | None = None,
    ) -> ChatMessage:
        """Answer one user message inside a session; returns the assistant turn.

        Raises:
            InvalidInputError: Blank session id or message.
            RetryExhaustedError: Embedding provider kept failing.
        """
        if not isinstance(session_id, str) or not session_id.strip():
            raise InvalidInputError("session id must be a non-empty string")
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("message must be a non-empty string")

        with request_context(session_id=session_id):
            await self._conversations.append(session_id, ChatMessage.user(text))

            result = await self._orchestrator.process_query(text, on_token)

            reply = ChatMessage.assistant(result)
            await self._conversations.append(session_id, reply)
            logger.info(
                "Answered message in session %s (%d sources)", session_id, len(result.sources)
            )

            await self._bus.publish(ANSWER_READY, AnswerReady(session_id=session_id, message=reply))
        return reply

    async def search(self, query: str, limit: int = 5) -> SearchResponse:
        """Raw similarity search, bypassing the search and query caches."""
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("query must be a non-empty string")
        embedding = await self._orchestrator.resolver.resolve(query)
        hits = await self._orchestrator.gateway.search(embedding, limit)
        return SearchResponse(query=query, results=hits)

    async def initialize(self) -> bool:
        """Ensure the news collection exists."""
        return await self._orchestrator.gateway.initialize()

    async def status(self) -> StatusReport:
        cache = self._orchestrator.cache
        gateway = self._orchestrator.gateway

        if await cache.health_check():
            cache_health = HealthStatus(status="healthy", detail=cache.store.backend_name)
        else:
            cache_health = HealthStatus(status="unhealthy", detail=cache.store.backend_name)

        return StatusReport(
            cache=cache_health,
            vector_db=await gateway.health_check(),
            embeddings=await self._orchestrator.resolver.health_check(),
            collection=await gateway.collection_info(),
            cache_stats=await cache.stats(),
        )

    async def aclose(self) -> None:
        """Release network clients held by the underlying components."""
        await self._orchestrator.resolver.aclose()
        await self._orchestrator.gateway.close()
        await self._orchestrator.cache.store.close()
