"""Story text handling - parsing, validation and narration prep."""

from feeled_ai.story.narration_text import NarrationText, prepare_narration_text
from feeled_ai.story.parser import looks_like_refusal, parse_story_markdown
from feeled_ai.story.validator import missing_sections, validate_story

__all__ = [
    "NarrationText",
    "looks_like_refusal",
    "missing_sections",
    "parse_story_markdown",
    "prepare_narration_text",
    "validate_story",
]
