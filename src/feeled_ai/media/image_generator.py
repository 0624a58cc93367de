"""Illustration generator - one storybook picture per story."""

import logging
from abc import ABC, abstractmethod

from openai import AsyncOpenAI

from feeled_ai.llm.credentials import ProviderCredentials

logger = logging.getLogger(__name__)

# Limits prompt size; the scene is an opening paragraph, not the whole story.
MAX_SCENE_CHARACTERS = 1000

PROMPT_TEMPLATE = """Generate a vibrant, child-friendly, storybook illustration.
Style: {style}
Scene: {title}. {description}
Do not include any text or words in the image."""


class ImageGenerator(ABC):
    """Image synthesis interface."""

    @abstractmethod
    async def generate_scene(self, scene_title: str, scene_description: str) -> str | None:
        """
        Generate an illustration of the scene.
        Returns base64 image bytes, or None if the provider produced nothing.
        """
        ...


class OpenAIImageGenerator(ImageGenerator):
    """Images API backed generator."""

    def __init__(
        self,
        credentials: ProviderCredentials,
        *,
        model: str,
        size: str,
        style: str,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or credentials.create_client()
        self._model = model
        self._size = size
        self._style = style

    def build_prompt(self, scene_title: str, scene_description: str) -> str:
        return PROMPT_TEMPLATE.format(
            style=self._style,
            title=scene_title.strip(),
            description=scene_description.strip()[:MAX_SCENE_CHARACTERS],
        )

    async def generate_scene(self, scene_title: str, scene_description: str) -> str | None:
        response = await self._client.images.generate(
            model=self._model,
            prompt=self.build_prompt(scene_title, scene_description),
            n=1,
            size=self._size,
        )
        if not response.data or not response.data[0].b64_json:
            logger.info("Image generation returned no image for %r", scene_title)
            return None
        return response.data[0].b64_json


def sniff_image_mime_type(data: bytes) -> str:
    """MIME type from magic bytes; PNG when unknown."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "image/webp"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    return "image/png"
