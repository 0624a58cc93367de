"""Heading-delimited story markdown -> PartialStoryRecord.

The model is asked for six ``# Heading`` sections but rarely follows the
format exactly: headings come with or without colons, in any case, wrapped
in emphasis, numbered, or with the section text on the heading line itself.
The scanner walks the text line by line. A recognised heading opens a
section, an unknown heading or a ``---`` break closes it, and every other
line is appended to the open section. Missing sections are left as ``None``;
completeness is the validator's job.
"""

import re
from collections.abc import Iterable

from feeled_ai.models import PartialStoryRecord

HEADING_SECTIONS = {
    "title": "title",
    "introduction": "introduction",
    "emotional trigger": "emotional_trigger",
    "concept explanation": "concept_explanation",
    "resolution": "resolution",
    "moral message": "moral_message",
}

_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}(?:[ \t]+(?P<text>.*?))?[ \t]*$")
_CLOSING_HASHES_RE = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_BREAK_RE = re.compile(r"^\s{0,3}(?:-{3,}|\*{3,}|_{3,})\s*$")
_FENCE_RE = re.compile(r"^\s*```")
_LIST_PREFIX_RE = re.compile(r"^(?:\d+|[ivx]+)[.)]\s*", re.IGNORECASE)
_SEPARATOR_RE = re.compile(r"[-_\s]+")
_TITLE_FALLBACK_RE = re.compile(
    r"^[\s#>*_]*title[*_]*\s*:[*_]*\s*(?P<rest>.+?)\s*$",
    re.IGNORECASE,
)


def normalize_heading(name: str) -> str:
    """Lowercase heading name without emphasis, numbering or punctuation."""
    name = name.strip().strip("*_`").strip()
    name = _LIST_PREFIX_RE.sub("", name)
    name = _SEPARATOR_RE.sub(" ", name)
    return name.strip(" :*_`").lower()


def split_heading(text: str) -> tuple[str, str]:
    """Split heading text into (section key or "", inline content)."""
    name, _, inline = _CLOSING_HASHES_RE.sub("", text).partition(":")
    key = HEADING_SECTIONS.get(normalize_heading(name), "")
    return key, inline.strip().strip("*_").strip()


class _SectionScanner:
    """Line-at-a-time state machine; ``current`` is the open section or None."""

    def __init__(self) -> None:
        self.current: str | None = None
        self.parts: dict[str, list[list[str]]] = {}

    def feed(self, line: str) -> None:
        if _FENCE_RE.match(line):
            return
        heading = _HEADING_RE.match(line)
        if heading:
            self._open(heading.group("text") or "")
        elif _BREAK_RE.match(line):
            self.current = None
        elif self.current is not None:
            self.parts[self.current][-1].append(line)

    def _open(self, heading_text: str) -> None:
        key, inline = split_heading(heading_text)
        if not key:
            self.current = None
            return
        self.current = key
        # A repeated heading starts a new part of the same section.
        self.parts.setdefault(key, []).append([inline] if inline else [])

    def sections(self) -> dict[str, str]:
        found: dict[str, str] = {}
        for key, parts in self.parts.items():
            texts = [text for text in ("\n".join(lines).strip() for lines in parts) if text]
            if texts:
                found[key] = "\n\n".join(texts)
        return found


def _fallback_title(lines: Iterable[str]) -> str | None:
    for line in lines:
        match = _TITLE_FALLBACK_RE.match(line)
        if match:
            title = match.group("rest").strip().strip("*_").strip()
            if title:
                return title
    return None


def parse_story_markdown(raw_text: str | None) -> PartialStoryRecord:
    """Extract the story sections. Never raises; returns what it can find."""
    lines = (raw_text or "").splitlines()
    scanner = _SectionScanner()
    for line in lines:
        scanner.feed(line)
    sections = scanner.sections()
    if "title" not in sections:
        title = _fallback_title(lines)
        if title:
            sections["title"] = title
    return PartialStoryRecord(**sections)


def looks_like_refusal(text: str | None, phrases: Iterable[str]) -> bool:
    """True when the reply opens with a known refusal phrase."""
    opening = (text or "").strip().lstrip("#*_> ").replace("’", "'").lower()
    return bool(opening) and any(opening.startswith(phrase.lower()) for phrase in phrases)
