"""LLM abstraction - OpenAI-compatible."""

from feeled_ai.llm.base import LLMClient
from feeled_ai.llm.credentials import ProviderCredentials
from feeled_ai.llm.openai_client import OpenAIClient

__all__ = ["LLMClient", "OpenAIClient", "ProviderCredentials"]
