# src/llm/answer_generator.py — v2
"""Answer generation from retrieved news context.

One prompt, one model call, no retry. Any failure resolves to
FALLBACK_ANSWER so the pipeline always finishes with a valid result.
If a native stream breaks after some chunks were delivered, the partial
text is kept and the fallback is appended after STREAM_BREAK, so the sink
always receives exactly the returned answer.

Streaming: when a token sink is given, the answer is delivered as
space-delimited tokens whose concatenation equals the returned string.
The same replay routine serves cached answers (rag/query_pipeline.py),
so callers cannot tell a cache hit from a fresh generation.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterator, Union

from newsrag.core.errors import GenerationError
from newsrag.llm.models import GeneratedAnswer, GenerationConfig

if TYPE_CHECKING:
    from newsrag.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

TokenSink = Callable[[str], Union[None, Awaitable[Any]]]

FALLBACK_ANSWER = (
    "I apologize, but I'm having trouble generating a response right now. "
    "Please try again later."
)
STREAM_BREAK = "\n\n"

PROMPT_TEMPLATE = """You are a helpful news assistant. Answer the user's question based on the provided news context. Be accurate, concise, and cite relevant information from the sources.

Context from recent news articles:
{context}

User Question: {query}

Please provide a comprehensive answer based on the news context above. If the context doesn't contain enough information to fully answer the question, mention that and provide what information is available."""


def build_prompt(query: str, context: str) -> str:
    return PROMPT_TEMPLATE.format(context=context, query=query)


def tokenize_for_stream(text: str) -> Iterator[str]:
    """Split on single spaces, keeping separators so tokens re-join exactly.

    >>> list(tokenize_for_stream("Hello big world"))
    ['Hello ', 'big ', 'world']
    """
    if not text:
        return
    words = text.split(" ")
    for word in words[:-1]:
        yield word + " "
    yield words[-1]


async def emit(on_token: TokenSink, token: str) -> None:
    """Deliver one token to a sync or async sink."""
    result = on_token(token)
    if inspect.isawaitable(result):
        await result


async def replay_tokens(text: str, on_token: TokenSink, delay_s: float = 0.0) -> None:
    """Stream a complete answer to a sink token by token, left to right."""
    for token in tokenize_for_stream(text):
        await emit(on_token, token)
        if delay_s > 0:
            await asyncio.sleep(delay_s)


class AnswerGenerator:
    """Prompt assembly plus a single guarded model call.

    Args:
        client: LLM provider client.
        config: Sampling parameters.
        token_delay_s: Pause between replayed tokens (UX pacing).
        stream_natively: Forward provider stream chunks instead of
            replaying the finished answer, when the client supports it.
    """

    def __init__(
        self,
        client: BaseLLMClient,
        config: GenerationConfig | None = None,
        token_delay_s: float = 0.0,
        stream_natively: bool = False,
    ) -> None:
        self._client = client
        self._config = config or GenerationConfig()
        self._token_delay_s = token_delay_s
        self._stream_natively = stream_natively

    async def generate(
        self,
        query: str,
        context: str,
        on_token: TokenSink | None = None,
    ) -> str:
        """Answer text; FALLBACK_ANSWER if the model call fails."""
        return (await self.answer(query, context, on_token)).text

    async def answer(
        self,
        query: str,
        context: str,
        on_token: TokenSink | None = None,
    ) -> GeneratedAnswer:
        """Like generate, but also reports whether the fallback was used."""
        prompt = build_prompt(query, context)

        if on_token is not None and self._stream_natively and self._client.supports_streaming:
            return await self._generate_streaming(prompt, on_token)

        fell_back = False
        try:
            response = await self._client.complete(prompt, self._config)
            text = response.content.strip()
            if not text:
                raise GenerationError("Model returned an empty answer")
            logger.debug(
                "Generated answer (%d chars, %d ms) with %s",
                len(text), response.latency_ms, self._client.model_name,
            )
        except Exception as e:
            logger.error("Error generating answer: %s", e)
            text = FALLBACK_ANSWER
            fell_back = True

        if on_token is not None:
            await replay_tokens(text, on_token, self._token_delay_s)
        return GeneratedAnswer(text=text, fell_back=fell_back)

    async def _generate_streaming(self, prompt: str, on_token: TokenSink) -> GeneratedAnswer:
        parts: list[str] = []
        chunks = self._client.stream(prompt, self._config).__aiter__()
        while True:
            try:
                chunk = await chunks.__anext__()
            except StopAsyncIteration:
                break
            except Exception as e:
                logger.error("Answer stream failed after %d chunks: %s", len(parts), e)
                return await self._append_fallback("".join(parts), on_token)
            parts.append(chunk)
            await emit(on_token, chunk)

        text = "".join(parts)
        if not text.strip():
            logger.error("Answer stream produced no text")
            return await self._append_fallback(text, on_token)
        return GeneratedAnswer(text=text)

    async def _append_fallback(self, delivered: str, on_token: TokenSink) -> GeneratedAnswer:
        # Text already handed to the sink cannot be taken back
        prefix = delivered
        if delivered.strip():
            prefix += STREAM_BREAK
            await emit(on_token, STREAM_BREAK)
        await replay_tokens(FALLBACK_ANSWER, on_token, self._token_delay_s)
        return GeneratedAnswer(text=prefix + FALLBACK_ANSWER, fell_back=True)
