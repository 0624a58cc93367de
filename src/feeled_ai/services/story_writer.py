"""Story writer - prompt building and story text generation."""

import logging
from collections.abc import AsyncIterator

from feeled_ai.errors import StoryGenerationError
from feeled_ai.llm.base import LLMClient
from feeled_ai.llm.openai_client import EMPTY_REPLY_MESSAGE
from feeled_ai.models import GenerationRequest

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert curriculum developer and a masterful storyteller for children.
You turn academic topics into short, emotionally engaging stories that teach the concept accurately.
Never include anything unsafe or unsuitable for school children."""

STORY_USER_TEMPLATE = """Your task is to create an emotional and educational story based on the user's request.
The story must be structured in a specific Markdown format with the following sections EXACTLY:
# Title: [A captivating title]
# Introduction: [Set the scene and introduce characters]
# Emotional Trigger: [A challenge, problem, or emotionally resonant event]
# Concept Explanation: [Clearly explain the educational concept through the story's events or dialogue]
# Resolution: [How the challenge was overcome and the concept was understood]
# Moral Message: [A concluding moral or takeaway]

Write every section in {language}, but keep the six headings in English exactly as shown.

---
USER REQUEST:
- Topic: "{topic}"
- Grade Level: "{grade}"
- Language: "{language}"
- Emotion Tone: "{emotion_tone}"
- My Role: "{user_role}"
---

Generate the story now."""


class StoryWriter:
    """Builds the story prompt and asks the LLM for heading-delimited markdown."""

    def __init__(self, llm: LLMClient, *, max_tokens: int = 2048, temperature: float = 0.7) -> None:
        self._llm = llm
        self._max_tokens = max_tokens
        self._temperature = temperature

    def build_messages(self, request: GenerationRequest) -> list[dict[str, str]]:
        user_prompt = STORY_USER_TEMPLATE.format(
            topic=request.topic,
            grade=request.grade.value,
            language=request.language.value,
            emotion_tone=request.emotion_tone.value,
            user_role=request.user_role.value,
        )
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ]

    async def write(self, request: GenerationRequest) -> str:
        """Whole story markdown in one reply."""
        text = await self._llm.chat(
            self.build_messages(request),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        if not text.strip():
            raise StoryGenerationError(EMPTY_REPLY_MESSAGE)
        logger.info("Story text received: %d characters", len(text))
        return text

    def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        """Story markdown as it is generated."""
        return self._llm.stream_chat(
            self.build_messages(request),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
