"""Unit tests for story markdown section parsing."""

import pytest

from feeled_ai.story import looks_like_refusal, parse_story_markdown
from tests.fakes import FULL_STORY, RAINDROP_STORY


def test_raindrop_story_parses_every_heading() -> None:
    """Headings on their own line own the lines below them."""

    partial = parse_story_markdown(RAINDROP_STORY)

    assert partial.title == "The Brave Raindrop"
    assert partial.introduction == "Once there was a raindrop..."
    assert partial.concept_explanation == "Water cycles through evaporation..."
    assert partial.resolution == "The raindrop became part of a river."
    assert partial.moral_message == "Small things can be part of something big."
    assert partial.emotional_trigger is None


def test_inline_heading_content_and_request_block() -> None:
    """Content after the heading colon is kept; the echoed request after --- is not."""

    partial = parse_story_markdown(FULL_STORY)

    assert partial.title == "The Brave Raindrop"
    assert partial.emotional_trigger == "One day the cloud grew heavy and Pip was scared of falling."
    assert partial.moral_message == "Change can be the start of a new adventure."
    assert "USER REQUEST" not in partial.moral_message


def test_heading_variants_are_recognised() -> None:
    """Case, emphasis, numbering, hyphens and heading depth do not matter."""

    text = "\n".join(
        [
            "## TITLE:",
            "Leaves",
            "### 1. **Introduction**",
            "A leaf wakes up.",
            "# emotional-trigger",
            "The sun hides.",
            "#### CONCEPT_EXPLANATION:",
            "Photosynthesis needs light.",
            "# Resolution :",
            "The sun returns.",
            "# **Moral Message:** Patience pays.",
        ]
    )

    partial = parse_story_markdown(text)

    assert partial.title == "Leaves"
    assert partial.introduction == "A leaf wakes up."
    assert partial.emotional_trigger == "The sun hides."
    assert partial.concept_explanation == "Photosynthesis needs light."
    assert partial.resolution == "The sun returns."
    assert partial.moral_message == "Patience pays."


def test_unknown_heading_closes_section_and_is_ignored() -> None:
    """Extra model sections are dropped without touching neighbours."""

    text = "# Introduction\nHello.\n# Vocabulary\n- evaporation\n# Resolution\nDone."

    partial = parse_story_markdown(text)

    assert partial.introduction == "Hello."
    assert partial.resolution == "Done."
    assert "evaporation" not in partial.model_dump_json()


def test_section_body_keeps_inner_blank_lines_but_is_trimmed() -> None:
    """Only leading and trailing whitespace is removed."""

    partial = parse_story_markdown("# Introduction\n\n\n  First.\n\nSecond.  \n\n\n")

    assert partial.introduction == "First.\n\nSecond."


def test_repeated_heading_appends() -> None:
    """A second heading of the same name continues the section."""

    partial = parse_story_markdown("# Resolution\nPart one.\n# Resolution\nPart two.")

    assert partial.resolution == "Part one.\n\nPart two."


def test_code_fence_wrapping_is_ignored() -> None:
    """Models sometimes wrap the whole reply in a markdown fence."""

    partial = parse_story_markdown("```markdown\n# Title\nFenced\n# Moral Message\nEnd.\n```")

    assert partial.title == "Fenced"
    assert partial.moral_message == "End."


def test_fallback_title_from_plain_line() -> None:
    """A 'Title: ...' line outside heading syntax still supplies the title."""

    partial = parse_story_markdown("**Title:** Sky High\n\n# Introduction\nUp we go.")

    assert partial.title == "Sky High"
    assert partial.introduction == "Up we go."


def test_empty_heading_is_missing_not_blank() -> None:
    """A heading with nothing under it does not count as found."""

    partial = parse_story_markdown("# Title\n\n# Introduction\nText")

    assert partial.title is None
    assert partial.found_sections() == ["introduction"]


def test_hash_without_space_is_body_text() -> None:
    """'#1' or '#kindness' inside a section is text, not a heading."""

    text = "\n".join(
        [
            "# Introduction",
            "Once there was a raindrop.",
            "#1 rule of the sky: every drop matters.",
            "Pip loved the clouds.",
            "# Moral Message",
            "Be kind.",
            "#kindness",
            "Always remember the cloud.",
        ]
    )

    partial = parse_story_markdown(text)

    assert partial.introduction == (
        "Once there was a raindrop.\n#1 rule of the sky: every drop matters.\nPip loved the clouds."
    )
    assert partial.moral_message == "Be kind.\n#kindness\nAlways remember the cloud."


def test_closing_hashes_are_dropped() -> None:
    partial = parse_story_markdown("# Title #\nSky High\n## Resolution: The sun returns. ##")

    assert partial.title == "Sky High"
    assert partial.resolution == "The sun returns."


@pytest.mark.parametrize(
    "raw",
    ["", None, "#", "###\n---\n***", "just prose with no headings", "# : \n:::", "\r\n# Title\r\nWindows\r\n"],
)
def test_parse_never_raises(raw) -> None:
    """Malformed input yields a (possibly empty) partial record."""

    partial = parse_story_markdown(raw)

    assert isinstance(partial.found_sections(), list)


def test_refusal_detection() -> None:
    """Refusal phrases are matched at the start of the reply only."""

    phrases = ["i'm sorry", "i cannot"]

    assert looks_like_refusal("I’m sorry, but I can't help with that.", phrases)
    assert looks_like_refusal("  **I cannot** write this story.", phrases)
    assert not looks_like_refusal("The hero said I'm sorry.", phrases)
    assert not looks_like_refusal("", phrases)
