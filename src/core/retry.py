# src/core/retry.py — v2
"""Bounded retry with linear (or exponential) backoff for remote calls.

Only the embedding resolver retries: the vector index is assumed to have
its own resilience and the answer generator degrades to a fallback answer.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal

from newsrag.core.errors import RetryExhaustedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """Retry budget for a remote operation.

    max_attempts counts the first call, so 3 means one call plus two retries.
    """

    max_attempts: int = 3
    base_delay_s: float = 1.0
    backoff: Literal["linear", "exponential"] = "linear"

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_s < 0:
            raise ValueError("base_delay_s must be >= 0")


DEFAULT_RETRY_CONFIG = RetryConfig()


def compute_delay(config: RetryConfig, attempt: int) -> float:
    """Delay to wait after the given failed attempt (1-based)."""
    if config.backoff == "exponential":
        return config.base_delay_s * (2 ** (attempt - 1))
    return config.base_delay_s * attempt


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    operation: str = "remote call",
    config: RetryConfig | None = None,
    **kwargs: Any,
) -> Any:
    """Execute an async function, retrying on any exception.

    Raises:
        RetryExhaustedError: If every attempt failed.
    """
    config = config or DEFAULT_RETRY_CONFIG
    attempt = 0

    while True:
        attempt += 1
        try:
            return await fn(*args, **kwargs)
        except Exception as e:
            if attempt >= config.max_attempts:
                raise RetryExhaustedError(operation, attempt, e) from e

            delay = compute_delay(config, attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s — retrying in %.1fs",
                operation, attempt, config.max_attempts, e, delay,
            )
            await asyncio.sleep(delay)
