# src/llm/models.py — v3
"""LLM-specific types: GenerationConfig, LLMResponse, GeneratedAnswer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from newsrag.config.settings import Settings


class GenerationConfig(BaseModel):
    """Sampling parameters sent with every generation request."""

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    top_k: int = Field(default=40, ge=1)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    max_output_tokens: int = Field(default=1024, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> GenerationConfig:
        return cls(
            temperature=settings.llm_temperature,
            top_k=settings.llm_top_k,
            top_p=settings.llm_top_p,
            max_output_tokens=settings.llm_max_output_tokens,
        )


class LLMResponse(BaseModel):
    """Normalized response from any LLM provider."""

    content: str
    input_tokens: int = 0
    output_tokens: int = 0
    model: str
    provider: str
    latency_ms: int = 0
    raw_response: Any = None


class GeneratedAnswer(BaseModel):
    """Answer text plus whether any part of it is the fallback message."""

    model_config = ConfigDict(frozen=True)

    text: str
    fell_back: bool = False
