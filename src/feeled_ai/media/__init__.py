"""Media generation - narration, illustration, transcription and WAV packaging."""

from feeled_ai.media.image_generator import ImageGenerator, OpenAIImageGenerator, sniff_image_mime_type
from feeled_ai.media.narrator import Narrator, OpenAINarrator
from feeled_ai.media.transcriber import OpenAITranscriber, Transcriber
from feeled_ai.media.wav import encode_wav, pcm_duration_seconds

__all__ = [
    "ImageGenerator",
    "Narrator",
    "OpenAIImageGenerator",
    "OpenAINarrator",
    "OpenAITranscriber",
    "Transcriber",
    "encode_wav",
    "pcm_duration_seconds",
    "sniff_image_mime_type",
]
