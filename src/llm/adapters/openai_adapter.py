# src/llm/adapters/openai_adapter.py — v2
"""OpenAI GPT adapter implementing BaseLLMClient.

Uses the official openai SDK. top_k has no equivalent in the chat
completions API and is ignored.
"""

from __future__ import annotations

import time
from typing import Any, AsyncIterator

from newsrag.core.errors import GenerationError
from newsrag.llm.base_client import BaseLLMClient
from newsrag.llm.models import GenerationConfig, LLMResponse


class OpenAIAdapter(BaseLLMClient):
    """OpenAI GPT adapter."""

    def __init__(self, model: str = "gpt-4o-mini", api_key: str = "", **kwargs: Any):
        self._model = model
        self._api_key = api_key
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            import openai

            self.__client = openai.AsyncOpenAI(api_key=self._api_key)
        return self.__client

    def _request(self, prompt: str, config: GenerationConfig) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": config.max_output_tokens,
            "temperature": config.temperature,
            "top_p": config.top_p,
        }

    async def complete(self, prompt: str, config: GenerationConfig) -> LLMResponse:
        t0 = time.monotonic()
        resp = await self._client.chat.completions.create(**self._request(prompt, config))
        latency = int((time.monotonic() - t0) * 1000)

        if not resp.choices:
            raise GenerationError("No response generated from OpenAI API")

        usage = resp.usage
        return LLMResponse(
            content=resp.choices[0].message.content or "",
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            model=self._model,
            provider="openai",
            latency_ms=latency,
            raw_response=resp,
        )

    async def stream(self, prompt: str, config: GenerationConfig) -> AsyncIterator[str]:
        resp = await self._client.chat.completions.create(
            **self._request(prompt, config), stream=True
        )
        async for chunk in resp:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content

    @property
    def supports_streaming(self) -> bool:
        return True

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model
