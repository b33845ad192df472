# src/llm/base_client.py — v2
"""Abstract LLM client interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from newsrag.llm.models import GenerationConfig, LLMResponse


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers."""

    @abstractmethod
    async def complete(self, prompt: str, config: GenerationConfig) -> LLMResponse:
        """Single-prompt completion."""

    async def stream(self, prompt: str, config: GenerationConfig) -> AsyncIterator[str]:
        """Yield text chunks as the provider produces them.

        Providers without native streaming yield the whole completion once.
        """
        response = await self.complete(prompt, config)
        yield response.content

    @property
    def supports_streaming(self) -> bool:
        """Whether stream() is backed by native provider streaming."""
        return False

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, openai)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier."""
