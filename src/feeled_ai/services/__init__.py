"""Business logic services."""

from feeled_ai.services.factory import create_story_service
from feeled_ai.services.story_service import GenerationStage, StoryService, result_payload
from feeled_ai.services.story_writer import StoryWriter

__all__ = ["GenerationStage", "StoryService", "StoryWriter", "create_story_service", "result_payload"]
