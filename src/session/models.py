# src/session/models.py — v1
"""Conversation models: Session and ChatMessage."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from newsrag.rag.models import QueryResult, Source


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """One conversation. last_activity moves on every appended message."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    created: datetime = Field(default_factory=_now)
    last_activity: datetime = Field(default_factory=_now, alias="lastActivity")


class ChatMessage(BaseModel):
    """Immutable transcript entry."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Literal["user", "assistant"]
    content: str
    sources: list[Source] | None = None
    timestamp: datetime = Field(default_factory=_now)

    @classmethod
    def user(cls, text: str) -> ChatMessage:
        return cls(role="user", content=text)

    @classmethod
    def assistant(cls, result: QueryResult) -> ChatMessage:
        return cls(role="assistant", content=result.answer, sources=list(result.sources))
