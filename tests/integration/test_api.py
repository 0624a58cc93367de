"""HTTP tests for the FastAPI app with provider fakes behind the service factory."""

import base64
import json

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from feeled_ai import main
from feeled_ai.errors import TTSError
from feeled_ai.main import app, get_service_factory
from tests.fakes import (
    PNG_BYTES,
    FakeImageGenerator,
    FakeLLM,
    FakeNarrator,
    make_service,
    make_settings,
)

HEADERS = {"X-API-Key": "sk-caller"}
STORY_BODY = {"topic": "The water cycle", "grade": "Grade 3", "emotion_tone": "Funny"}


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def use_service():
    """Install a fake-backed service; returns the credentials each request used."""
    seen = []

    def install(**kwargs) -> list:
        def factory(credentials):
            seen.append(credentials)
            return make_service(**kwargs)

        app.dependency_overrides[get_service_factory] = lambda: factory
        return seen

    return install


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_options(client) -> None:
    data = client.get("/api/options").json()

    assert len(data["grades"]) == 12
    assert data["emotion_tones"] == ["Curious", "Inspiring", "Funny", "Moral"]
    assert "Hindi" in data["languages"]
    assert data["defaults"]["grade"] == "Grade 5"


def test_create_story(client, use_service) -> None:
    seen = use_service()

    response = client.post("/api/stories", json=STORY_BODY, headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["story"]["title"] == "The Brave Raindrop"
    assert data["story"]["emotion_tone"] == "Funny"
    assert base64.b64decode(data["audio_base64"])[:4] == b"RIFF"
    assert base64.b64decode(data["image_base64"]) == PNG_BYTES
    assert data["warnings"] == []
    assert seen[0].api_key == "sk-caller"


def test_create_story_without_narration(client, use_service) -> None:
    """A narration failure still returns the story."""

    use_service(narrator=FakeNarrator(error=TTSError()))

    data = client.post("/api/stories", json=STORY_BODY, headers=HEADERS).json()

    assert data["story"]["resolution"]
    assert data["audio_base64"] is None
    assert data["warnings"][0]["asset"] == "narration"


def test_incomplete_story_is_422(client, use_service) -> None:
    use_service(llm=FakeLLM("# Title\nHalf a story\n# Introduction\nOnce..."))

    response = client.post("/api/stories", json=STORY_BODY, headers=HEADERS)

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["kind"] == "story_generation_error"
    assert error["missing_sections"] == ["concept_explanation", "resolution", "moral_message"]


def test_rate_limit_is_429_with_retry_after(client, use_service) -> None:
    request = httpx.Request("POST", "https://api.example.test/v1/chat/completions")
    error = openai.RateLimitError(
        "slow down",
        response=httpx.Response(429, request=request),
        body={"code": "rate_limit_exceeded"},
    )
    use_service(llm=FakeLLM(error=error))

    response = client.post("/api/stories", json=STORY_BODY, headers=HEADERS)

    assert response.status_code == 429
    assert response.headers["retry-after"] == "60"
    assert response.json()["error"]["reason"] == "rate_limit"


def test_missing_api_key_is_401(client, use_service, monkeypatch) -> None:
    use_service()
    monkeypatch.setattr(main, "get_settings", lambda: make_settings(llm_api_key=""))

    response = client.post("/api/stories", json=STORY_BODY)

    assert response.status_code == 401
    assert response.json()["error"]["reason"] == "missing_api_key"


def test_blank_topic_is_rejected(client, use_service) -> None:
    use_service()

    response = client.post("/api/stories", json={"topic": "   "}, headers=HEADERS)

    assert response.status_code == 422
    assert "detail" in response.json()


def test_stream_story(client, use_service) -> None:
    use_service()

    response = client.post("/api/stories/stream", json=STORY_BODY, headers=HEADERS)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")
    events = [json.loads(line) for line in response.text.splitlines() if line]
    assert events[0]["event"] == "partial"
    assert events[-1]["event"] == "complete"
    assert events[-1]["result"]["story"]["title"] == "The Brave Raindrop"


def test_stream_story_error_event(client, use_service) -> None:
    use_service(llm=FakeLLM("I cannot help with that."))

    response = client.post("/api/stories/stream", json=STORY_BODY, headers=HEADERS)

    events = [json.loads(line) for line in response.text.splitlines() if line]
    assert events[-1]["event"] == "error"
    assert events[-1]["error"]["block_reason"] == "I cannot help with that."


def test_narration(client, use_service) -> None:
    use_service()

    response = client.post(
        "/api/narrations",
        json={"story_text": "# Title\nPip\n# Introduction\nOnce upon a time.", "voice": "echo"},
        headers=HEADERS,
    )

    data = response.json()
    assert response.status_code == 200
    assert data["mime_type"] == "audio/wav"
    assert data["duration_seconds"] > 0
    assert base64.b64decode(data["audio_base64"])[8:12] == b"WAVE"


def test_narration_failure_is_an_error(client, use_service) -> None:
    use_service(narrator=FakeNarrator(error=TTSError()))

    response = client.post("/api/narrations", json={"story_text": "Once upon a time."}, headers=HEADERS)

    assert response.status_code == 502
    assert response.json()["error"]["kind"] == "tts_error"


def test_illustration(client, use_service) -> None:
    use_service()

    data = client.post(
        "/api/illustrations",
        json={"scene_title": "Pip", "scene_description": "A raindrop in a cloud"},
        headers=HEADERS,
    ).json()

    assert data["mime_type"] == "image/png"
    assert base64.b64decode(data["image_base64"]) == PNG_BYTES


def test_illustration_without_image(client, use_service) -> None:
    use_service(illustrator=FakeImageGenerator(image=None))

    data = client.post("/api/illustrations", json={"scene_title": "Pip"}, headers=HEADERS).json()

    assert data == {"image_base64": None, "mime_type": None}


def test_transcription(client, use_service) -> None:
    use_service()

    response = client.post(
        "/api/transcriptions",
        json={"audio_base64": base64.b64encode(b"speech").decode(), "mime_type": "audio/webm;codecs=opus"},
        headers=HEADERS,
    )

    assert response.json() == {"transcription": "photosynthesis"}


def test_transcription_rejects_invalid_base64(client, use_service) -> None:
    use_service()

    response = client.post(
        "/api/transcriptions",
        json={"audio_base64": "not base64!", "mime_type": "audio/webm"},
        headers=HEADERS,
    )

    assert response.status_code == 422
