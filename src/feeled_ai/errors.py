"""User-facing error taxonomy and translation of upstream failures.

Every failure that reaches a caller is one of four ``AppError`` kinds.
Callers branch on the exception type (or its ``kind`` tag), never on the
message text.
"""

import asyncio
import binascii
import json
import logging
from collections.abc import Iterable
from enum import Enum
from typing import Any, ClassVar

import httpx
import openai

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for failures shown to the user."""

    kind: ClassVar[str] = "app_error"
    title: ClassVar[str] = "An Unexpected Error Occurred"
    status_code: int = 500
    default_message: ClassVar[str] = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation for HTTP responses and stream events."""
        return {"kind": self.kind, "title": self.title, "message": self.message}


class NetworkError(AppError):
    """The provider could not be reached or did not answer in time."""

    kind = "network_error"
    title = "Network Connection Error"
    status_code = 503
    default_message = (
        "It seems you're offline. Please check your internet connection and try again."
    )


class APIErrorReason(str, Enum):
    """Why the provider rejected a request."""

    AUTH = "auth"
    MISSING_API_KEY = "missing_api_key"
    RATE_LIMIT = "rate_limit"
    QUOTA = "quota"
    MISCONFIGURED = "misconfigured"
    UPSTREAM = "upstream"
    MALFORMED = "malformed"


_API_REASON_MESSAGES = {
    APIErrorReason.AUTH: "The API key provided is invalid. Please check the configuration.",
    APIErrorReason.MISSING_API_KEY: "No API key is configured. Please provide a valid API key to continue.",
    APIErrorReason.RATE_LIMIT: (
        "The AI service is receiving too many requests right now. "
        "Please wait a minute and try again."
    ),
    APIErrorReason.QUOTA: (
        "The AI service quota for this API key has been used up. "
        "Please check your plan and billing details."
    ),
    APIErrorReason.MISCONFIGURED: (
        "The AI service is not configured correctly on the server. Please contact support."
    ),
    APIErrorReason.UPSTREAM: "There was an issue communicating with the AI. Please try again later.",
    APIErrorReason.MALFORMED: "The AI service returned an unexpected response. Please try again.",
}

_API_REASON_STATUS = {
    APIErrorReason.AUTH: 401,
    APIErrorReason.MISSING_API_KEY: 401,
    APIErrorReason.RATE_LIMIT: 429,
    APIErrorReason.QUOTA: 429,
    APIErrorReason.MISCONFIGURED: 500,
    APIErrorReason.UPSTREAM: 502,
    APIErrorReason.MALFORMED: 502,
}


class APIError(AppError):
    """The provider answered with a failure."""

    kind = "api_error"
    title = "AI Service Error"
    status_code = 502
    default_message = _API_REASON_MESSAGES[APIErrorReason.UPSTREAM]

    def __init__(
        self,
        message: str | None = None,
        *,
        reason: APIErrorReason = APIErrorReason.UPSTREAM,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message or _API_REASON_MESSAGES[reason])
        self.reason = reason
        self.upstream_status = upstream_status
        self.status_code = _API_REASON_STATUS[reason]

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason.value
        return data


class StoryGenerationError(AppError):
    """The model produced an incomplete story or refused to write one."""

    kind = "story_generation_error"
    title = "Story Generation Failed"
    status_code = 422
    default_message = (
        "The AI had trouble generating the story. "
        "Please try adjusting your topic or try again."
    )

    def __init__(
        self,
        message: str | None = None,
        *,
        missing_sections: Iterable[str] = (),
        block_reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.missing_sections = tuple(missing_sections)
        self.block_reason = block_reason

    @classmethod
    def blocked(cls, reason: str | None) -> "StoryGenerationError":
        """Story refused by a safety filter; surfaces the reason when known."""
        if reason:
            message = (
                f"Story generation was blocked for safety reasons: {reason}. "
                "Please try a different topic."
            )
        else:
            message = "Story generation was blocked for safety reasons. Please try a different topic."
        return cls(message, block_reason=reason or "unspecified")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.missing_sections:
            data["missing_sections"] = list(self.missing_sections)
        if self.block_reason:
            data["block_reason"] = self.block_reason
        return data


class TTSError(AppError):
    """Narration call succeeded but produced no usable audio."""

    kind = "tts_error"
    title = "Audio Narration Failed"
    status_code = 502
    default_message = (
        "The story was created, but the audio narration could not be generated. "
        "Please try again."
    )


TIMEOUT_MESSAGE = "The AI service took too long to respond. Please try again."

# Provider codes that mean the prompt or output tripped a safety filter.
_SAFETY_CODES = {"content_policy_violation", "content_filter", "moderation_blocked"}


def _provider_code(exc: openai.APIStatusError) -> str:
    code = getattr(exc, "code", None)
    if not code and isinstance(exc.body, dict):
        code = exc.body.get("code")
    return str(code or "").lower()


def _from_status(status: int, code: str = "") -> AppError:
    """Map an upstream HTTP status (plus provider code) to an AppError."""
    if code in _SAFETY_CODES:
        return StoryGenerationError.blocked(code)
    if status in (401, 403):
        return APIError(reason=APIErrorReason.AUTH, upstream_status=status)
    if status == 429:
        reason = APIErrorReason.QUOTA if code == "insufficient_quota" else APIErrorReason.RATE_LIMIT
        return APIError(reason=reason, upstream_status=status)
    if status == 404:
        return APIError(reason=APIErrorReason.MISCONFIGURED, upstream_status=status)
    if status in (408, 504):
        return NetworkError(TIMEOUT_MESSAGE)
    return APIError(reason=APIErrorReason.UPSTREAM, upstream_status=status)


def translate_error(exc: BaseException) -> AppError:
    """Classify any failure raised while talking to the provider."""
    if isinstance(exc, AppError):
        return exc
    # APITimeoutError subclasses APIConnectionError, so it goes first.
    if isinstance(exc, (openai.APITimeoutError, httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return NetworkError(TIMEOUT_MESSAGE)
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError)):
        return NetworkError()
    if isinstance(exc, openai.APIStatusError):
        return _from_status(exc.status_code, _provider_code(exc))
    if isinstance(exc, httpx.HTTPStatusError):
        return _from_status(exc.response.status_code)
    if isinstance(exc, (openai.APIResponseValidationError, json.JSONDecodeError, binascii.Error, KeyError, TypeError, ValueError)):
        logger.warning("Treating %s as a malformed provider reply", type(exc).__name__, exc_info=exc)
        return APIError(reason=APIErrorReason.MALFORMED)
    logger.error("Unclassified failure %s: %s", type(exc).__name__, exc)
    return APIError()
