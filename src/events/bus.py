# src/events/bus.py — v2
"""In-process publish/subscribe for completed answers.

Transport adapters (websocket, SSE, webhooks) subscribe to ANSWER_READY
instead of being called by the chat service directly. Delivery is in
subscription order; one failing handler never stops the others and never
fails the publisher.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Union

from pydantic import BaseModel, ConfigDict

from newsrag.session.models import ChatMessage

logger = logging.getLogger(__name__)

ANSWER_READY = "answer.ready"

Handler = Callable[[Any], Union[None, Awaitable[Any]]]


class AnswerReady(BaseModel):
    """Published after an assistant turn has been recorded."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    message: ChatMessage


class MessageBus:
    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Callable[[], None]:
        """Register a handler; the returned callable unsubscribes it."""
        self._handlers[topic].append(handler)

        def unsubscribe() -> None:
            try:
                self._handlers[topic].remove(handler)
            except ValueError:
                pass

        return unsubscribe

    async def publish(self, topic: str, event: Any) -> int:
        """Deliver an event; returns how many handlers completed."""
        delivered = 0
        for handler in list(self._handlers.get(topic, ())):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:
                logger.exception("Handler %r failed on %s", handler, topic)
        return delivered
