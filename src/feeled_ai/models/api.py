"""Request bodies of the standalone media endpoints."""

import base64
import binascii

from pydantic import BaseModel, Field, field_validator

from feeled_ai.models.request import EmotionTone, NarrationVoice


class NarrationBody(BaseModel):
    """Narrate already generated story text."""

    story_text: str = Field(..., min_length=1, max_length=20000)
    voice: NarrationVoice | None = None
    emotion_tone: EmotionTone = EmotionTone.CURIOUS


class IllustrationBody(BaseModel):
    """Illustrate one scene."""

    scene_title: str = Field(..., min_length=1, max_length=300)
    scene_description: str = Field(default="", max_length=5000)


class TranscriptionBody(BaseModel):
    """Recorded speech to transcribe."""

    audio_base64: str = Field(..., min_length=1)
    mime_type: str = Field(..., pattern=r"^audio/[\w.+-]+(;.*)?$")

    @field_validator("audio_base64")
    @classmethod
    def _valid_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError("audio_base64 is not valid base64") from e
        return value
