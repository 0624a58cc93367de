"""Text-generation client interface used by the story writer."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

ChatMessages = list[dict[str, str]]


class LLMClient(ABC):
    """Chat-style text model. Implementations raise provider exceptions untouched."""

    @abstractmethod
    async def chat(
        self,
        messages: ChatMessages,
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float | None = None,
    ) -> str:
        """
        Whole reply for ``messages`` ({"role", "content"} dicts).
        Raises StoryGenerationError when the model refuses or is filtered.
        """
        ...

    @abstractmethod
    def stream_chat(
        self,
        messages: ChatMessages,
        *,
        model: str | None = None,
        max_tokens: int = 2048,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        """Same request as ``chat`` but yields content deltas as they arrive."""
        ...
