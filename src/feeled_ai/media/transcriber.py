"""Speech-to-text for spoken topic input."""

import base64
import logging
import mimetypes
from abc import ABC, abstractmethod

from openai import AsyncOpenAI

from feeled_ai.llm.credentials import ProviderCredentials

logger = logging.getLogger(__name__)


class Transcriber(ABC):
    """Transcription interface."""

    @abstractmethod
    async def transcribe(self, audio_base64: str, mime_type: str) -> str:
        """Return the plain-text transcript of base64 audio."""
        ...


class OpenAITranscriber(Transcriber):
    """Audio transcriptions API backed transcriber."""

    def __init__(
        self,
        credentials: ProviderCredentials,
        *,
        model: str,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or credentials.create_client()
        self._model = model

    async def transcribe(self, audio_base64: str, mime_type: str) -> str:
        audio = base64.b64decode(audio_base64, validate=True)
        base_type = mime_type.split(";")[0].strip()
        extension = mimetypes.guess_extension(base_type) or ".webm"
        response = await self._client.audio.transcriptions.create(
            model=self._model,
            file=(f"speech{extension}", audio, base_type),
        )
        text = (response.text or "").strip()
        logger.info("Transcribed %d bytes of %s into %d characters", len(audio), base_type, len(text))
        return text
