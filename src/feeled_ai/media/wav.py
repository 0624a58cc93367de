"""Raw PCM -> WAV container."""

import struct

WAV_HEADER_SIZE = 44
PCM_FORMAT_TAG = 1

# RIFF header, fmt chunk, data chunk header. Little-endian, no padding.
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def encode_wav(
    pcm: bytes,
    sample_rate_hz: int = 24000,
    channels: int = 1,
    bits_per_sample: int = 16,
) -> bytes:
    """
    Prefix PCM samples with a 44-byte RIFF/WAVE header.
    Pure: identical input always gives identical bytes. PCM is not inspected.
    """
    block_align = channels * bits_per_sample // 8
    byte_rate = sample_rate_hz * block_align
    data_size = len(pcm)
    header = _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        PCM_FORMAT_TAG,
        channels,
        sample_rate_hz,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_size,
    )
    return header + bytes(pcm)


def pcm_duration_seconds(
    pcm_length: int,
    sample_rate_hz: int = 24000,
    channels: int = 1,
    bits_per_sample: int = 16,
) -> float:
    """Playback length of ``pcm_length`` bytes of PCM."""
    byte_rate = sample_rate_hz * channels * bits_per_sample // 8
    return pcm_length / float(byte_rate) if byte_rate else 0.0
