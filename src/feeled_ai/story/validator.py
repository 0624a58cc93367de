"""Completeness check that turns a partial parse into a StoryRecord."""

from feeled_ai.errors import StoryGenerationError
from feeled_ai.models import (
    REQUIRED_SECTIONS,
    SECTION_FIELDS,
    SECTION_LABELS,
    EmotionTone,
    PartialStoryRecord,
    StoryRecord,
)


def missing_sections(partial: PartialStoryRecord) -> list[str]:
    """Required sections that are absent or blank, in story order."""
    return [name for name in REQUIRED_SECTIONS if not (getattr(partial, name) or "").strip()]


def validate_story(partial: PartialStoryRecord, emotion_tone: EmotionTone) -> StoryRecord:
    """
    Return the immutable story, or raise StoryGenerationError naming every
    missing section at once. Tone comes from the request, never the text.
    """
    missing = missing_sections(partial)
    if missing:
        labels = ", ".join(SECTION_LABELS[name] for name in missing)
        raise StoryGenerationError(
            f"The AI returned an incomplete story (missing: {labels}). "
            "Please try adjusting your topic or try again.",
            missing_sections=missing,
        )
    fields = {name: (getattr(partial, name) or "").strip() for name in SECTION_FIELDS}
    return StoryRecord(**fields, emotion_tone=emotion_tone)
