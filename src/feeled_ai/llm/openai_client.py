"""OpenAI-compatible LLM client implementation."""

import logging
from collections.abc import AsyncIterator
from typing import Any

from openai import AsyncOpenAI

from feeled_ai.errors import StoryGenerationError
from feeled_ai.llm.base import LLMClient
from feeled_ai.llm.credentials import ProviderCredentials

logger = logging.getLogger(__name__)

EMPTY_REPLY_MESSAGE = "The AI failed to generate story content. It might be a temporary issue."


class OpenAIClient(LLMClient):
    """OpenAI API client - works with OpenAI or compatible endpoints (e.g. LiteLLM)."""

    def __init__(
        self,
        credentials: ProviderCredentials,
        *,
        model: str,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or credentials.create_client()
        self._model = model

    def _request(
        self,
        messages: list[dict[str, str]],
        model: str | None,
        max_tokens: int,
        temperature: float | None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        return kwargs

    async def chat(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float | None = None,
    ) -> str:
        """Call OpenAI-compatible chat completion."""
        response = await self._client.chat.completions.create(
            **self._request(messages, model, max_tokens, temperature)
        )
        if not response.choices:
            raise StoryGenerationError(EMPTY_REPLY_MESSAGE)
        choice = response.choices[0]
        refusal = getattr(choice.message, "refusal", None)
        if refusal:
            raise StoryGenerationError.blocked(refusal)
        if choice.finish_reason == "content_filter":
            raise StoryGenerationError.blocked("content_filter")
        if choice.finish_reason == "length":
            logger.warning("Chat completion hit max_tokens=%d", max_tokens)
        return choice.message.content or ""

    async def stream_chat(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        """Streamed chat completion; yields non-empty content deltas."""
        stream = await self._client.chat.completions.create(
            **self._request(messages, model, max_tokens, temperature),
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            choice = chunk.choices[0]
            refusal = getattr(choice.delta, "refusal", None)
            if refusal:
                raise StoryGenerationError.blocked(refusal)
            if choice.finish_reason == "content_filter":
                raise StoryGenerationError.blocked("content_filter")
            if choice.delta.content:
                yield choice.delta.content
