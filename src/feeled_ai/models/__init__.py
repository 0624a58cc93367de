"""Data models."""

from feeled_ai.models.assets import (
    AssetWarning,
    AudioHandle,
    GenerationResult,
    ImageHandle,
    RawAssetBundle,
)
from feeled_ai.models.request import (
    EmotionTone,
    GenerationRequest,
    Grade,
    Language,
    NarrationVoice,
    UserRole,
)
from feeled_ai.models.story import (
    REQUIRED_SECTIONS,
    SECTION_FIELDS,
    SECTION_LABELS,
    PartialStoryRecord,
    StoryRecord,
)

__all__ = [
    "AssetWarning",
    "AudioHandle",
    "EmotionTone",
    "GenerationRequest",
    "GenerationResult",
    "Grade",
    "ImageHandle",
    "Language",
    "NarrationVoice",
    "PartialStoryRecord",
    "RawAssetBundle",
    "REQUIRED_SECTIONS",
    "SECTION_FIELDS",
    "SECTION_LABELS",
    "StoryRecord",
    "UserRole",
]
