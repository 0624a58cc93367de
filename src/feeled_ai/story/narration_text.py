"""Story text clean-up and length cap before narration."""

import logging
import re
from dataclasses import dataclass

from feeled_ai.story.parser import split_heading

logger = logging.getLogger(__name__)

_REQUEST_BLOCK_RE = re.compile(r"^[ \t]*---[ \t]*$", re.MULTILINE)
_HEADING_LINE_RE = re.compile(r"^[ \t]{0,3}#{1,6}(?:[ \t]+(?P<text>.*?))?[ \t]*$", re.MULTILINE)
_EXTRA_NEWLINES_RE = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class NarrationText:
    """Text to narrate and whether it was cut short."""

    text: str
    truncated: bool
    original_length: int


def _heading_inline_content(match: re.Match) -> str:
    # "# Title: The Brave Raindrop" keeps "The Brave Raindrop".
    _, inline = split_heading(match.group("text") or "")
    return inline


def prepare_narration_text(story_text: str, max_characters: int) -> NarrationText:
    """
    Drop the echoed request block after ``---``, heading markers and runs of
    blank lines, then hard-cut to ``max_characters``. Cutting is silent.
    """
    text = story_text.replace("\r\n", "\n")
    block = _REQUEST_BLOCK_RE.search(text)
    if block:
        text = text[: block.start()]
    text = _HEADING_LINE_RE.sub(_heading_inline_content, text)
    text = _EXTRA_NEWLINES_RE.sub("\n\n", text).strip()
    original_length = len(text)
    truncated = original_length > max_characters
    if truncated:
        logger.info("Narration text truncated from %d to %d characters", original_length, max_characters)
        text = text[:max_characters]
    return NarrationText(text=text, truncated=truncated, original_length=original_length)
