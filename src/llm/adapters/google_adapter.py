# src/llm/adapters/google_adapter.py — v2
"""Google Gemini adapter implementing BaseLLMClient.

Uses the google-generativeai SDK; supports native streaming.
"""

from __future__ import annotations

import time
from typing import Any, AsyncIterator

from newsrag.core.errors import GenerationError
from newsrag.llm.base_client import BaseLLMClient
from newsrag.llm.models import GenerationConfig, LLMResponse


class GoogleAdapter(BaseLLMClient):
    """Google Gemini adapter."""

    def __init__(self, model: str = "gemini-pro", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key
        self.__model = None

    def _generative_model(self):
        if self.__model is None:
            try:
                import google.generativeai as genai
            except ImportError as e:
                raise ImportError(
                    "google-generativeai package required: pip install google-generativeai"
                ) from e
            genai.configure(api_key=self._api_key)
            self.__model = genai.GenerativeModel(self._model)
        return self.__model

    @staticmethod
    def _gen_config(config: GenerationConfig) -> dict[str, Any]:
        return {
            "temperature": config.temperature,
            "top_k": config.top_k,
            "top_p": config.top_p,
            "max_output_tokens": config.max_output_tokens,
        }

    async def complete(self, prompt: str, config: GenerationConfig) -> LLMResponse:
        model = self._generative_model()

        t0 = time.monotonic()
        resp = await model.generate_content_async(
            prompt, generation_config=self._gen_config(config),
        )
        latency = int((time.monotonic() - t0) * 1000)

        if not getattr(resp, "candidates", None):
            raise GenerationError("No response generated from Gemini API")

        usage = getattr(resp, "usage_metadata", None)
        return LLMResponse(
            content=resp.text or "",
            input_tokens=getattr(usage, "prompt_token_count", 0) if usage else 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) if usage else 0,
            model=self._model,
            provider="google",
            latency_ms=latency,
            raw_response=resp,
        )

    async def stream(self, prompt: str, config: GenerationConfig) -> AsyncIterator[str]:
        model = self._generative_model()
        resp = await model.generate_content_async(
            prompt, generation_config=self._gen_config(config), stream=True,
        )
        async for chunk in resp:
            text = getattr(chunk, "text", "")
            if text:
                yield text

    @property
    def supports_streaming(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model
