"""Narration synthesis - story text to base64 raw PCM."""

import logging
from abc import ABC, abstractmethod

from openai import AsyncOpenAI

from feeled_ai.errors import TTSError
from feeled_ai.llm.credentials import ProviderCredentials

logger = logging.getLogger(__name__)


class Narrator(ABC):
    """Speech synthesis interface. Output is 16-bit 24 kHz mono PCM."""

    @abstractmethod
    async def synthesize(self, text: str, voice: str, instructions: str) -> str:
        """Return base64-encoded raw PCM, or raise TTSError when there is none."""
        ...


class OpenAINarrator(Narrator):
    """Audio-capable chat model asked to read the text aloud as pcm16."""

    def __init__(
        self,
        credentials: ProviderCredentials,
        *,
        model: str,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or credentials.create_client()
        self._model = model

    async def synthesize(self, text: str, voice: str, instructions: str) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            modalities=["text", "audio"],
            audio={"voice": voice, "format": "pcm16"},
            messages=[
                {"role": "system", "content": instructions},
                {"role": "user", "content": text},
            ],
        )
        audio = response.choices[0].message.audio if response.choices else None
        if audio is None or not audio.data:
            logger.error("Narration call returned no audio (model=%s, voice=%s)", self._model, voice)
            raise TTSError()
        return audio.data
