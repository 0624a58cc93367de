"""FastAPI application - story, narration, illustration and transcription endpoints."""

import json
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse, StreamingResponse

from feeled_ai.config import get_settings, get_story_rules
from feeled_ai.errors import APIError, APIErrorReason, AppError
from feeled_ai.llm import ProviderCredentials
from feeled_ai.models import (
    EmotionTone,
    GenerationRequest,
    Grade,
    Language,
    NarrationVoice,
    UserRole,
)
from feeled_ai.models.api import IllustrationBody, NarrationBody, TranscriptionBody
from feeled_ai.services import StoryService, create_story_service, result_payload

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ServiceFactory = Callable[[ProviderCredentials], StoryService]

RATE_LIMIT_RETRY_AFTER_SECONDS = 60


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load config once and report what the deployment can do."""
    settings = get_settings()
    get_story_rules(str(settings.config_dir or ""))
    logger.info(
        "Starting: story_model=%s narration_model=%s illustrations=%s",
        settings.story_model,
        settings.narration_model,
        settings.illustration_enabled,
    )
    if not settings.llm_api_key:
        logger.warning("LLM_API_KEY not set; callers must send X-API-Key")
    yield


app = FastAPI(
    title="FeelEd AI",
    description="Turns academic topics into short illustrated, narrated stories",
    version="0.1.0",
    lifespan=lifespan,
)


def get_credentials(x_api_key: str | None = Header(default=None)) -> ProviderCredentials:
    """Credentials for this request only."""
    return ProviderCredentials.resolve(get_settings(), x_api_key)


def get_service_factory() -> ServiceFactory:
    """Factory seam; tests override it."""
    return create_story_service


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Typed failures become {"error": {...}} with the error's status."""
    headers = None
    if isinstance(exc, APIError) and exc.reason == APIErrorReason.RATE_LIMIT:
        headers = {"Retry-After": str(RATE_LIMIT_RETRY_AFTER_SECONDS)}
    logger.info("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, exc.kind)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()}, headers=headers)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check for load balancers."""
    return {"status": "ok"}


@app.get("/api/options")
async def options() -> dict[str, Any]:
    """Choices for the story form."""
    settings = get_settings()
    return {
        "grades": [g.value for g in Grade],
        "languages": [lang.value for lang in Language],
        "emotion_tones": [t.value for t in EmotionTone],
        "user_roles": [r.value for r in UserRole],
        "voices": [v.value for v in NarrationVoice],
        "defaults": {
            "grade": Grade.GRADE_5.value,
            "language": Language.ENGLISH.value,
            "emotion_tone": EmotionTone.CURIOUS.value,
            "user_role": UserRole.TEACHER.value,
            "voice": settings.default_voice,
        },
        "illustrations": settings.illustration_enabled,
    }


@app.post("/api/stories")
async def create_story(
    body: GenerationRequest,
    credentials: ProviderCredentials = Depends(get_credentials),
    factory: ServiceFactory = Depends(get_service_factory),
) -> dict[str, Any]:
    """Story, narration and illustration in one response."""
    async with factory(credentials) as service:
        with await service.generate(body) as result:
            return result_payload(result)


@app.post("/api/stories/stream")
async def stream_story(
    body: GenerationRequest,
    credentials: ProviderCredentials = Depends(get_credentials),
    factory: ServiceFactory = Depends(get_service_factory),
) -> StreamingResponse:
    """
    Newline-delimited JSON events: ``partial`` while the story is written,
    then ``complete`` or ``error``.
    """

    async def events() -> AsyncIterator[str]:
        async with factory(credentials) as service:
            async for event in service.generate_events(body):
                yield json.dumps(event) + "\n"

    return StreamingResponse(events(), media_type="application/x-ndjson")


@app.post("/api/narrations")
async def create_narration(
    body: NarrationBody,
    credentials: ProviderCredentials = Depends(get_credentials),
    factory: ServiceFactory = Depends(get_service_factory),
) -> dict[str, Any]:
    """Narrate story text. Unlike story generation, failure here is an error."""
    async with factory(credentials) as service:
        voice = body.voice.value if body.voice else None
        with await service.narrate(body.story_text, voice, body.emotion_tone) as audio:
            return {
                "audio_base64": audio.to_base64(),
                "mime_type": audio.mime_type,
                "duration_seconds": audio.duration_seconds,
            }


@app.post("/api/illustrations")
async def create_illustration(
    body: IllustrationBody,
    credentials: ProviderCredentials = Depends(get_credentials),
    factory: ServiceFactory = Depends(get_service_factory),
) -> dict[str, Any]:
    """Illustrate a scene; nulls when the provider returned no image."""
    async with factory(credentials) as service:
        image = await service.illustrate(body.scene_title, body.scene_description)
    if image is None:
        return {"image_base64": None, "mime_type": None}
    with image:
        return {"image_base64": image.to_base64(), "mime_type": image.mime_type}


@app.post("/api/transcriptions")
async def create_transcription(
    body: TranscriptionBody,
    credentials: ProviderCredentials = Depends(get_credentials),
    factory: ServiceFactory = Depends(get_service_factory),
) -> dict[str, str]:
    """Transcribe a spoken topic."""
    async with factory(credentials) as service:
        text = await service.transcribe(body.audio_base64, body.mime_type)
    return {"transcription": text}
