"""Unit tests for translating provider failures into AppErrors."""

import asyncio
import logging

import httpx
import openai
import pytest

from feeled_ai.errors import (
    TIMEOUT_MESSAGE,
    APIError,
    APIErrorReason,
    NetworkError,
    StoryGenerationError,
    TTSError,
    translate_error,
)

REQUEST = httpx.Request("POST", "https://api.example.test/v1/chat/completions")


def _status_error(cls, status: int, code: str | None = None):
    body = {"code": code} if code else None
    return cls("upstream failure", response=httpx.Response(status, request=REQUEST), body=body)


def test_app_errors_pass_through() -> None:
    error = TTSError()
    assert translate_error(error) is error


@pytest.mark.parametrize(
    "exc",
    [
        openai.APITimeoutError(request=REQUEST),
        httpx.ReadTimeout("slow", request=REQUEST),
        asyncio.TimeoutError(),
    ],
)
def test_timeouts_are_network_errors(exc) -> None:
    error = translate_error(exc)

    assert isinstance(error, NetworkError)
    assert error.message == TIMEOUT_MESSAGE


@pytest.mark.parametrize(
    "exc",
    [openai.APIConnectionError(request=REQUEST), httpx.ConnectError("refused", request=REQUEST)],
)
def test_transport_failures_are_network_errors(exc) -> None:
    error = translate_error(exc)

    assert isinstance(error, NetworkError)
    assert "offline" in error.message
    assert error.status_code == 503


def test_rate_limit_and_quota_have_distinct_copy() -> None:
    rate_limited = translate_error(_status_error(openai.RateLimitError, 429, "rate_limit_exceeded"))
    out_of_quota = translate_error(_status_error(openai.RateLimitError, 429, "insufficient_quota"))

    assert rate_limited.reason is APIErrorReason.RATE_LIMIT
    assert out_of_quota.reason is APIErrorReason.QUOTA
    assert rate_limited.message != out_of_quota.message
    assert rate_limited.status_code == out_of_quota.status_code == 429


def test_bad_key_is_auth_error() -> None:
    error = translate_error(_status_error(openai.AuthenticationError, 401))

    assert isinstance(error, APIError)
    assert error.reason is APIErrorReason.AUTH
    assert error.upstream_status == 401
    assert error.to_dict()["reason"] == "auth"


def test_unknown_model_is_misconfiguration() -> None:
    error = translate_error(_status_error(openai.NotFoundError, 404))

    assert error.reason is APIErrorReason.MISCONFIGURED


def test_safety_code_is_story_generation_error() -> None:
    """Safety blocks are reported as story failures, not service failures."""

    error = translate_error(_status_error(openai.BadRequestError, 400, "content_policy_violation"))

    assert isinstance(error, StoryGenerationError)
    assert error.block_reason == "content_policy_violation"
    assert error.status_code == 422


def test_httpx_status_error() -> None:
    exc = httpx.HTTPStatusError("bad gateway", request=REQUEST, response=httpx.Response(503, request=REQUEST))

    error = translate_error(exc)

    assert error.reason is APIErrorReason.UPSTREAM
    assert error.upstream_status == 503


def test_gateway_timeout_status_is_network_error() -> None:
    error = translate_error(_status_error(openai.InternalServerError, 504))

    assert isinstance(error, NetworkError)
    assert error.message == TIMEOUT_MESSAGE


@pytest.mark.parametrize("exc", [ValueError("bad"), KeyError("choices"), TypeError("None")])
def test_malformed_payloads(exc, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="feeled_ai.errors"):
        error = translate_error(exc)

    assert error.reason is APIErrorReason.MALFORMED
    assert error.status_code == 502
    assert type(exc).__name__ in caplog.text


def test_unclassified_failure_is_generic_api_error() -> None:
    error = translate_error(RuntimeError("boom"))

    assert isinstance(error, APIError)
    assert error.reason is APIErrorReason.UPSTREAM


def test_blocked_without_reason() -> None:
    error = StoryGenerationError.blocked(None)

    assert error.block_reason == "unspecified"
    assert error.message.startswith("Story generation was blocked for safety reasons.")
    assert error.to_dict() == {
        "kind": "story_generation_error",
        "title": "Story Generation Failed",
        "message": error.message,
        "block_reason": "unspecified",
    }
