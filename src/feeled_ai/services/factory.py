"""Service factory - wires provider clients for one set of credentials."""

from feeled_ai.config import Settings, get_settings, get_story_rules
from feeled_ai.llm import OpenAIClient, ProviderCredentials
from feeled_ai.media import OpenAIImageGenerator, OpenAINarrator, OpenAITranscriber
from feeled_ai.services.story_service import DEFAULT_ILLUSTRATION_STYLE, StoryService
from feeled_ai.services.story_writer import StoryWriter


def create_story_service(
    credentials: ProviderCredentials,
    settings: Settings | None = None,
) -> StoryService:
    """
    Build a StoryService whose collaborators share one provider connection
    pool. The caller closes it (``async with``) when the request is done.
    """
    settings = settings or get_settings()
    rules = get_story_rules(str(settings.config_dir or ""))
    client = credentials.create_client()
    llm = OpenAIClient(credentials, model=settings.story_model, client=client)
    writer = StoryWriter(
        llm,
        max_tokens=settings.story_max_tokens,
        temperature=settings.story_temperature,
    )
    illustrator = None
    if settings.illustration_enabled:
        illustrator = OpenAIImageGenerator(
            credentials,
            model=settings.image_model,
            size=settings.image_size,
            style=rules.get("illustration", {}).get("style") or DEFAULT_ILLUSTRATION_STYLE,
            client=client,
        )
    return StoryService(
        writer,
        OpenAINarrator(credentials, model=settings.narration_model, client=client),
        settings,
        illustrator=illustrator,
        transcriber=OpenAITranscriber(credentials, model=settings.transcription_model, client=client),
        rules=rules,
        client=client,
    )
