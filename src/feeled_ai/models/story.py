"""Story records - parser output and the validated story."""

from pydantic import BaseModel, ConfigDict, Field

from feeled_ai.models.request import EmotionTone

# Section fields in story order.
SECTION_FIELDS = (
    "title",
    "introduction",
    "emotional_trigger",
    "concept_explanation",
    "resolution",
    "moral_message",
)

REQUIRED_SECTIONS = (
    "title",
    "introduction",
    "concept_explanation",
    "resolution",
    "moral_message",
)

SECTION_LABELS = {
    "title": "Title",
    "introduction": "Introduction",
    "emotional_trigger": "Emotional Trigger",
    "concept_explanation": "Concept Explanation",
    "resolution": "Resolution",
    "moral_message": "Moral Message",
}


class PartialStoryRecord(BaseModel):
    """Whatever sections the parser found. Any of them may be missing."""

    title: str | None = None
    introduction: str | None = None
    emotional_trigger: str | None = None
    concept_explanation: str | None = None
    resolution: str | None = None
    moral_message: str | None = None

    def found_sections(self) -> list[str]:
        """Section fields holding non-blank text."""
        return [name for name in SECTION_FIELDS if (getattr(self, name) or "").strip()]


class StoryRecord(BaseModel):
    """A validated story. Built by the validator only, never mutated."""

    model_config = ConfigDict(frozen=True)

    title: str
    introduction: str
    emotional_trigger: str = ""
    concept_explanation: str
    resolution: str
    moral_message: str
    emotion_tone: EmotionTone = Field(..., description="Stamped from the request")

    def sections(self) -> list[tuple[str, str]]:
        """(label, text) pairs in reading order, skipping empty optional ones."""
        return [
            (SECTION_LABELS[name], getattr(self, name))
            for name in SECTION_FIELDS
            if getattr(self, name)
        ]

    def to_markdown(self) -> str:
        """Render back to the heading-delimited form."""
        return "\n\n".join(f"# {label}\n{text}" for label, text in self.sections())
