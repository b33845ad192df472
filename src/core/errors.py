# src/core/errors.py — v2
"""Exception hierarchy shared by all modules.

Propagation policy:
  - InvalidInputError: raised before any remote call is attempted.
  - EmbeddingError / RetryExhaustedError: abort the query pipeline.
  - GenerationError: always absorbed by the answer generator.
  - ConfigurationError: raised while loading Settings, never at request time.
  - Cache backend errors never leave cache/content_cache.py.
"""

from __future__ import annotations


class NewsRAGError(Exception):
    """Base class for all newsrag errors."""


class InvalidInputError(NewsRAGError, ValueError):
    """Malformed caller input (empty query, empty session id, ...)."""


class EmbeddingError(NewsRAGError):
    """Embedding provider returned an error or an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RetryExhaustedError(NewsRAGError):
    """All attempts of a retried remote operation failed."""

    def __init__(self, operation: str, attempts: int, last_error: Exception):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"'{operation}' failed after {attempts} attempts: {last_error}"
        )


class GenerationError(NewsRAGError):
    """Generative model returned no usable answer."""


class UnsupportedProviderError(NewsRAGError, ValueError):
    """Raised when a provider name is not registered."""


class UnsupportedBackendError(NewsRAGError, ValueError):
    """Raised when a cache or vector store backend is not supported."""


# Not a ValueError: pydantic would wrap it into a ValidationError
class ConfigurationError(NewsRAGError):
    """Raised when configuration is internally inconsistent."""
