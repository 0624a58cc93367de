"""Generated assets - transient raw bundle and caller-owned handles."""

import base64
from dataclasses import dataclass, field

from pydantic import BaseModel

from feeled_ai.models.story import StoryRecord


class RawAssetBundle(BaseModel):
    """Provider payloads for one request, before conversion. Never persisted."""

    story_text: str
    audio_base64: str | None = None
    image_base64: str | None = None


class _BinaryHandle:
    """Playable/displayable bytes owned by the caller until released."""

    def __init__(self, data: bytes, mime_type: str) -> None:
        self._data: bytes | None = data
        self.mime_type = mime_type
        self.size = len(data)

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise ValueError(f"{type(self).__name__} has been released")
        return self._data

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"

    def release(self) -> None:
        """Drop the bytes. Safe to call more than once."""
        self._data = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()


class AudioHandle(_BinaryHandle):
    """WAV narration."""

    def __init__(self, data: bytes, duration_seconds: float, mime_type: str = "audio/wav") -> None:
        super().__init__(data, mime_type)
        self.duration_seconds = duration_seconds


class ImageHandle(_BinaryHandle):
    """Story illustration."""


@dataclass
class AssetWarning:
    """An optional asset that degraded to nothing."""

    asset: str
    kind: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"asset": self.asset, "kind": self.kind, "message": self.message}


@dataclass
class GenerationResult:
    """Story plus whichever optional assets succeeded."""

    story: StoryRecord
    story_markdown: str
    narration: AudioHandle | None = None
    illustration: ImageHandle | None = None
    warnings: list[AssetWarning] = field(default_factory=list)

    def release(self) -> None:
        """Release every handle this result owns."""
        for handle in (self.narration, self.illustration):
            if handle is not None:
                handle.release()

    def __enter__(self) -> "GenerationResult":
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()
