"""Per-request provider credentials."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from feeled_ai.config import Settings
from feeled_ai.errors import APIError, APIErrorReason


@dataclass(frozen=True)
class ProviderCredentials:
    """Capability to call the provider. Resolved for each request, never cached."""

    api_key: str
    base_url: str | None = None

    @classmethod
    def resolve(cls, settings: Settings, client_api_key: str | None = None) -> "ProviderCredentials":
        """Caller-supplied key wins when allowed, else the server key."""
        key = (client_api_key or "").strip() if settings.allow_client_api_keys else ""
        key = key or settings.llm_api_key.strip()
        if not key:
            raise APIError(reason=APIErrorReason.MISSING_API_KEY)
        return cls(api_key=key, base_url=settings.llm_base_url)

    def create_client(self) -> AsyncOpenAI:
        """AsyncOpenAI bound to these credentials. Retries are left to the caller."""
        kwargs: dict = {"api_key": self.api_key, "max_retries": 0}
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return AsyncOpenAI(**kwargs)
