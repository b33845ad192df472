# src/logging/context.py — v3
"""Request-scoped logging context — attach session_id, query_id, stage to records.

Context variables follow asyncio task boundaries, so concurrent queries
never see each other's identifiers. request_context() restores the
previous values on exit, so one call's ids never label the next call's logs.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator

_session_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "session_id", default=None
)
_query_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "query_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    session_id: str | None = None
    query_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        session_id=_session_id.get(),
        query_id=_query_id.get(),
        stage=_stage.get(),
    )


@contextmanager
def request_context(
    session_id: str | None = None, query_id: str | None = None
) -> Iterator[None]:
    """Bind request identifiers for the duration of a block.

    None leaves the enclosing value in place (a query inside a chat turn
    keeps the turn's session_id). The stage starts empty. Everything is
    restored on exit, including after an exception.
    """
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token]] = []
    if session_id is not None:
        tokens.append((_session_id, _session_id.set(session_id)))
    if query_id is not None:
        tokens.append((_query_id, _query_id.set(query_id)))
    tokens.append((_stage, _stage.set(None)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def set_stage(stage: str | None) -> None:
    """Set the pipeline stage currently executing."""
    _stage.set(stage)
