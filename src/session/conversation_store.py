# src/session/conversation_store.py — v1
"""Per-session append-only message log with sliding expiration.

Keys: "session:<id>" holds the Session record, "chat:<id>" holds the
message list (RPUSH order is conversation order). Every append pushes
first and only then refreshes both TTLs, so EXPIRE never targets a list
that does not exist yet.

Independent from the query cache: a question answered from cache in one
session is still recorded in that session's own transcript. Unlike the
content cache, backend errors here propagate.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone

from pydantic import ValidationError

from newsrag.cache.base_cache_store import BaseCacheStore
from newsrag.cache.models import CHAT_HISTORY_PREFIX, SESSION_PREFIX
from newsrag.core.errors import InvalidInputError
from newsrag.session.models import ChatMessage, Session

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_S = 3_600


class ConversationStore:
    """Session records and chat histories on a key/value backend.

    Args:
        store: Backend shared with (but namespaced apart from) the cache.
        ttl_s: Inactivity window after which a session and its history expire.
    """

    def __init__(self, store: BaseCacheStore, ttl_s: int = DEFAULT_SESSION_TTL_S) -> None:
        if ttl_s <= 0:
            raise ValueError("ttl_s must be > 0")
        self._store = store
        self._ttl_s = ttl_s

    @property
    def ttl_s(self) -> int:
        return self._ttl_s

    async def create_session(self, session_id: str | None = None) -> str:
        """Create a session record; a uuid4 id is generated when omitted."""
        if session_id is None:
            session_id = str(uuid.uuid4())
        _check_session_id(session_id)
        session = Session(id=session_id)
        await self._store.set(
            _session_key(session_id), session.model_dump_json(by_alias=True), self._ttl_s
        )
        logger.info("Created session %s", session_id)
        return session_id

    async def get_session(self, session_id: str) -> Session | None:
        _check_session_id(session_id)
        raw = await self._store.get(_session_key(session_id))
        if raw is None:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Corrupt session record %s: %s", session_id, e)
            return None

    async def append(self, session_id: str, message: ChatMessage) -> int:
        """Append a message and slide both expirations; returns history length."""
        _check_session_id(session_id)
        history_key = _history_key(session_id)

        length = await self._store.rpush(history_key, message.model_dump_json(by_alias=True))

        existing = await self.get_session(session_id)
        session = Session(
            id=session_id,
            created=existing.created if existing else datetime.now(timezone.utc),
            last_activity=datetime.now(timezone.utc),
        )
        await self._store.set(
            _session_key(session_id), session.model_dump_json(by_alias=True), self._ttl_s
        )
        await self._store.expire(history_key, self._ttl_s)

        logger.debug("Appended %s message to %s (%d total)", message.role, session_id, length)
        return length

    async def history(self, session_id: str) -> list[ChatMessage]:
        """Messages in append order."""
        _check_session_id(session_id)
        messages: list[ChatMessage] = []
        for raw in await self._store.lrange(_history_key(session_id), 0, -1):
            try:
                messages.append(ChatMessage.model_validate(json.loads(raw)))
            except (ValueError, ValidationError) as e:
                logger.warning("Skipping corrupt message in %s: %s", session_id, e)
        return messages

    async def clear(self, session_id: str) -> bool:
        """Drop the whole history (the session record is kept)."""
        _check_session_id(session_id)
        removed = await self._store.delete([_history_key(session_id)])
        logger.info("Cleared history of session %s", session_id)
        return removed > 0

    async def ttl(self, session_id: str) -> tuple[int, int]:
        """Remaining TTL of (session record, history list), Redis conventions."""
        _check_session_id(session_id)
        return (
            await self._store.ttl(_session_key(session_id)),
            await self._store.ttl(_history_key(session_id)),
        )


def _session_key(session_id: str) -> str:
    return f"{SESSION_PREFIX}{session_id}"


def _history_key(session_id: str) -> str:
    return f"{CHAT_HISTORY_PREFIX}{session_id}"


def _check_session_id(session_id: str) -> None:
    if not isinstance(session_id, str) or not session_id.strip():
        raise InvalidInputError("session id must be a non-empty string")
