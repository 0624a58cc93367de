"""Story service - text, narration and illustration for one request.

Per request the service moves IDLE -> TEXT_READY -> VALIDATED -> DONE, or to
FAILED with a typed AppError. Story text is mandatory. Narration and the
illustration are started together only once the story validated; each has
its own timeout and any failure there degrades to "no asset" plus a warning.
"""

import asyncio
import base64
import logging
from collections.abc import AsyncIterator, Awaitable
from enum import Enum
from typing import Any, NoReturn, TypeVar

from openai import AsyncOpenAI

from feeled_ai.config import Settings
from feeled_ai.errors import APIError, APIErrorReason, StoryGenerationError, TTSError, translate_error
from feeled_ai.media import (
    ImageGenerator,
    Narrator,
    Transcriber,
    encode_wav,
    pcm_duration_seconds,
    sniff_image_mime_type,
)
from feeled_ai.models import (
    AssetWarning,
    AudioHandle,
    EmotionTone,
    GenerationRequest,
    GenerationResult,
    ImageHandle,
    RawAssetBundle,
    StoryRecord,
)
from feeled_ai.services.story_writer import StoryWriter
from feeled_ai.story import (
    looks_like_refusal,
    parse_story_markdown,
    prepare_narration_text,
    validate_story,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_REFUSAL_PHRASES = ("i'm sorry", "i am sorry", "i can't", "i cannot", "i'm unable")
DEFAULT_NARRATION_INSTRUCTIONS = (
    "Read the user's story aloud in a {tone} tone, exactly as written."
)
DEFAULT_ILLUSTRATION_STYLE = "Whimsical, colorful, digital painting, soft lighting."


class GenerationStage(str, Enum):
    """Where a generation request is."""

    IDLE = "idle"
    TEXT_READY = "text_ready"
    VALIDATED = "validated"
    DONE = "done"
    FAILED = "failed"


def _raise_translated(exc: Exception) -> NoReturn:
    error = translate_error(exc)
    if error is exc:
        raise error
    raise error from exc


class StoryService:
    """Orchestrates story generation and its optional assets."""

    def __init__(
        self,
        writer: StoryWriter,
        narrator: Narrator,
        settings: Settings,
        *,
        illustrator: ImageGenerator | None = None,
        transcriber: Transcriber | None = None,
        rules: dict[str, Any] | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._writer = writer
        self._narrator = narrator
        self._illustrator = illustrator
        self._transcriber = transcriber
        self._settings = settings
        self._rules = rules or {}
        self._client = client

    async def aclose(self) -> None:
        """Close the provider connection pool, if this service owns one."""
        if self._client is not None:
            await self._client.close()

    async def __aenter__(self) -> "StoryService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -- story text -------------------------------------------------------

    def _refusal_phrases(self) -> list[str]:
        return self._rules.get("refusal_phrases") or list(DEFAULT_REFUSAL_PHRASES)

    def accept_story_text(self, text: str, request: GenerationRequest) -> StoryRecord:
        """Parse and validate model text. Raises StoryGenerationError."""
        partial = parse_story_markdown(text)
        if not partial.found_sections() and looks_like_refusal(text, self._refusal_phrases()):
            first_line = text.strip().splitlines()[0][:200]
            raise StoryGenerationError.blocked(first_line)
        return validate_story(partial, request.emotion_tone)

    def _log_stage(self, request: GenerationRequest, stage: GenerationStage) -> None:
        logger.info("Story %r: %s", request.topic[:60], stage.value)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate a validated story plus whichever assets succeed."""
        stage = GenerationStage.IDLE
        self._log_stage(request, stage)
        try:
            text = await asyncio.wait_for(
                self._writer.write(request),
                timeout=self._settings.text_timeout_seconds,
            )
            stage = GenerationStage.TEXT_READY
            self._log_stage(request, stage)
            story = self.accept_story_text(text, request)
        except Exception as exc:
            logger.warning("Story %r failed after %s: %s", request.topic[:60], stage.value, exc)
            self._log_stage(request, GenerationStage.FAILED)
            _raise_translated(exc)
        self._log_stage(request, GenerationStage.VALIDATED)
        result = await self._attach_assets(request, story, RawAssetBundle(story_text=text))
        self._log_stage(request, GenerationStage.DONE)
        return result

    async def generate_events(self, request: GenerationRequest) -> AsyncIterator[dict[str, Any]]:
        """
        Streamed generation. Yields ``partial`` events as sections fill in,
        then one ``complete`` event with the result or one ``error`` event.
        """
        chunks: list[str] = []
        last_snapshot: dict[str, str] | None = None
        stream = self._writer.stream(request)
        loop = asyncio.get_running_loop()
        # The text timeout bounds the whole stream.
        deadline = loop.time() + self._settings.text_timeout_seconds
        self._log_stage(request, GenerationStage.IDLE)
        try:
            while True:
                try:
                    delta = await asyncio.wait_for(
                        anext(stream),
                        timeout=max(deadline - loop.time(), 0.0),
                    )
                except StopAsyncIteration:
                    break
                chunks.append(delta)
                snapshot = parse_story_markdown("".join(chunks)).model_dump(exclude_none=True)
                if snapshot != last_snapshot:
                    last_snapshot = snapshot
                    yield {"event": "partial", "story": snapshot}
            text = "".join(chunks)
            if not text.strip():
                raise StoryGenerationError()
            self._log_stage(request, GenerationStage.TEXT_READY)
            story = self.accept_story_text(text, request)
        except Exception as exc:
            error = translate_error(exc)
            logger.warning("Streamed story %r failed: %s", request.topic[:60], error.kind)
            self._log_stage(request, GenerationStage.FAILED)
            yield {"event": "error", "error": error.to_dict()}
            return
        finally:
            await stream.aclose()

        self._log_stage(request, GenerationStage.VALIDATED)
        with await self._attach_assets(request, story, RawAssetBundle(story_text=text)) as result:
            self._log_stage(request, GenerationStage.DONE)
            yield {"event": "complete", "result": result_payload(result)}

    # -- optional assets --------------------------------------------------

    async def _attach_assets(
        self,
        request: GenerationRequest,
        story: StoryRecord,
        bundle: RawAssetBundle,
    ) -> GenerationResult:
        voice = (request.voice.value if request.voice else None) or self._settings.default_voice
        narration_call = self._best_effort(
            "narration",
            self._narrate_story(story, voice, bundle),
            self._settings.narration_timeout_seconds,
        )
        if self._illustrator is not None and self._settings.illustration_enabled:
            illustration_call = self._best_effort(
                "illustration",
                self._illustrate_story(story, bundle),
                self._settings.illustration_timeout_seconds,
            )
        else:
            illustration_call = _nothing()
        (narration, narration_warning), (illustration, illustration_warning) = await asyncio.gather(
            narration_call, illustration_call
        )
        return GenerationResult(
            story=story,
            story_markdown=bundle.story_text,
            narration=narration,
            illustration=illustration,
            warnings=[w for w in (narration_warning, illustration_warning) if w is not None],
        )

    async def _best_effort(
        self,
        asset: str,
        call: Awaitable[T],
        timeout: float,
    ) -> tuple[T | None, AssetWarning | None]:
        try:
            return await asyncio.wait_for(call, timeout=timeout), None
        except Exception as exc:
            error = translate_error(exc)
            logger.warning("Continuing without %s: %s (%s)", asset, error.message, type(exc).__name__)
            return None, AssetWarning(asset=asset, kind=error.kind, message=error.message)

    async def _narrate_story(self, story: StoryRecord, voice: str, bundle: RawAssetBundle) -> AudioHandle:
        prepared = prepare_narration_text(story.to_markdown(), self._settings.narration_max_characters)
        bundle.audio_base64 = await self._narrator.synthesize(
            prepared.text, voice, self._narration_instructions(story.emotion_tone)
        )
        return self.audio_handle(bundle.audio_base64)

    async def _illustrate_story(self, story: StoryRecord, bundle: RawAssetBundle) -> ImageHandle | None:
        bundle.image_base64 = await self._illustrator.generate_scene(story.title, story.introduction)
        return image_handle(bundle.image_base64)

    def _narration_instructions(self, tone: EmotionTone) -> str:
        template = self._rules.get("narration", {}).get("instructions") or DEFAULT_NARRATION_INSTRUCTIONS
        return template.format(tone=tone.value.lower())

    def audio_handle(self, audio_base64: str) -> AudioHandle:
        """Decode provider PCM and wrap it as a WAV handle."""
        pcm = base64.b64decode(audio_base64, validate=True)
        if not pcm:
            raise TTSError()
        rate = self._settings.narration_sample_rate_hz
        return AudioHandle(encode_wav(pcm, sample_rate_hz=rate), pcm_duration_seconds(len(pcm), rate))

    # -- standalone operations ---------------------------------------------

    async def narrate(
        self,
        story_text: str,
        voice: str | None = None,
        emotion_tone: EmotionTone = EmotionTone.CURIOUS,
    ) -> AudioHandle:
        """Narrate arbitrary story markdown. Failures raise."""
        prepared = prepare_narration_text(story_text, self._settings.narration_max_characters)
        if not prepared.text:
            raise TTSError("There is no story text to narrate.")
        try:
            audio_base64 = await asyncio.wait_for(
                self._narrator.synthesize(
                    prepared.text,
                    voice or self._settings.default_voice,
                    self._narration_instructions(emotion_tone),
                ),
                timeout=self._settings.narration_timeout_seconds,
            )
            return self.audio_handle(audio_base64)
        except Exception as exc:
            _raise_translated(exc)

    async def illustrate(self, scene_title: str, scene_description: str) -> ImageHandle | None:
        """Illustrate one scene. None when the provider returns no image."""
        if self._illustrator is None or not self._settings.illustration_enabled:
            raise APIError(
                "Illustrations are disabled on this server.",
                reason=APIErrorReason.MISCONFIGURED,
            )
        try:
            image_base64 = await asyncio.wait_for(
                self._illustrator.generate_scene(scene_title, scene_description),
                timeout=self._settings.illustration_timeout_seconds,
            )
            return image_handle(image_base64)
        except Exception as exc:
            _raise_translated(exc)

    async def transcribe(self, audio_base64: str, mime_type: str) -> str:
        """Speech-to-text for spoken topics."""
        if self._transcriber is None:
            raise APIError("Transcription is not available.", reason=APIErrorReason.MISCONFIGURED)
        try:
            return await asyncio.wait_for(
                self._transcriber.transcribe(audio_base64, mime_type),
                timeout=self._settings.transcription_timeout_seconds,
            )
        except Exception as exc:
            _raise_translated(exc)


async def _nothing() -> tuple[None, None]:
    return None, None


def image_handle(image_base64: str | None) -> ImageHandle | None:
    """Decode a provider image; None stays None."""
    if not image_base64:
        return None
    data = base64.b64decode(image_base64, validate=True)
    return ImageHandle(data, sniff_image_mime_type(data))


def result_payload(result: GenerationResult) -> dict[str, Any]:
    """JSON-ready view of a result. Read before the handles are released."""
    narration = result.narration
    illustration = result.illustration
    return {
        "story": result.story.model_dump(mode="json"),
        "story_markdown": result.story_markdown,
        "audio_base64": narration.to_base64() if narration else None,
        "audio_mime_type": narration.mime_type if narration else None,
        "audio_duration_seconds": narration.duration_seconds if narration else None,
        "image_base64": illustration.to_base64() if illustration else None,
        "image_mime_type": illustration.mime_type if illustration else None,
        "warnings": [w.to_dict() for w in result.warnings],
    }
