"""
Codec Module

Canonical audio sample representation and WAVE container encoding.
"""

from .wav_codec import (
    CANONICAL_SAMPLE_RATE,
    WAV_HEADER_SIZE,
    RawAudioSamples,
    WaveHeader,
    samples_from_float32le,
    samples_to_float32le,
    quantize_to_int16,
    encode_to_container,
    read_container_header
)

__all__ = [
    "CANONICAL_SAMPLE_RATE",
    "WAV_HEADER_SIZE",
    "RawAudioSamples",
    "WaveHeader",
    "samples_from_float32le",
    "samples_to_float32le",
    "quantize_to_int16",
    "encode_to_container",
    "read_container_header"
]
