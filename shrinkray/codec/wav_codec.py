#!/usr/bin/env python3

"""
WAV Sample Codec

Converts between the canonical in-memory sample representation (mono,
32-bit float) and the byte forms used at the edges of the audio path:
raw little-endian float32 PCM as produced by the decoder and consumed by
the media provider, and a minimal 16-bit PCM RIFF/WAVE container for
delivery.
"""

import struct
from dataclasses import dataclass

import numpy as np

from ..errors import DecodeError

CANONICAL_SAMPLE_RATE = 44100
FLOAT32_WIDTH = 4
PCM16_WIDTH = 2
PCM16_SCALE = 32767
WAV_HEADER_SIZE = 44

# RIFF header, fmt chunk and data chunk header for mono 16-bit PCM
_HEADER_STRUCT = struct.Struct('<4sI4s4sIHHIIHH4sI')

@dataclass(frozen=True)
class RawAudioSamples:
    """Immutable mono float32 samples at a known sample rate"""
    samples: np.ndarray
    sample_rate: int = CANONICAL_SAMPLE_RATE

    def __post_init__(self):
        samples = np.ascontiguousarray(self.samples, dtype=np.float32).reshape(-1)
        samples.setflags(write=False)
        object.__setattr__(self, 'samples', samples)

    def __len__(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return len(self) / float(self.sample_rate)

@dataclass(frozen=True)
class WaveHeader:
    """Fields read back from a 44-byte container header"""
    riff_size: int
    audio_format: int
    channels: int
    sample_rate: int
    byte_rate: int
    block_align: int
    bits_per_sample: int
    data_size: int

    @property
    def sample_count(self) -> int:
        return self.data_size // PCM16_WIDTH

def samples_from_float32le(raw: bytes, sample_rate: int = CANONICAL_SAMPLE_RATE) -> RawAudioSamples:
    """Reinterpret little-endian float32 bytes as samples.

    A byte length that is not a multiple of four means the stream was cut
    mid-sample, which is treated as corruption rather than truncated away.
    """
    if len(raw) % FLOAT32_WIDTH != 0:
        raise DecodeError(
            f"Raw PCM length {len(raw)} is not a multiple of {FLOAT32_WIDTH} bytes"
        )
    samples = np.frombuffer(raw, dtype='<f4').astype(np.float32)
    return RawAudioSamples(samples=samples, sample_rate=sample_rate)

def samples_to_float32le(audio: RawAudioSamples) -> bytes:
    return audio.samples.astype('<f4').tobytes()

def quantize_to_int16(samples: np.ndarray) -> np.ndarray:
    """Clamp to [-1, 1], scale by 32767 and round half toward +infinity.

    NaN samples encode as silence.
    """
    values = np.nan_to_num(np.asarray(samples, dtype=np.float64), nan=0.0)
    scaled = np.clip(values, -1.0, 1.0) * PCM16_SCALE
    return np.floor(scaled + 0.5).astype('<i2')

def encode_to_container(audio: RawAudioSamples, sample_rate: int) -> bytes:
    """Encode samples into a 44-byte-header mono 16-bit PCM WAVE container."""
    pcm = quantize_to_int16(audio.samples).tobytes()
    data_size = len(pcm)
    header = _HEADER_STRUCT.pack(
        b'RIFF',
        36 + data_size,
        b'WAVE',
        b'fmt ',
        16,                 # fmt chunk size
        1,                  # integer PCM
        1,                  # mono
        sample_rate,
        sample_rate * PCM16_WIDTH,
        PCM16_WIDTH,        # block align
        16,                 # bits per sample
        b'data',
        data_size
    )
    return header + pcm

def read_container_header(data: bytes) -> WaveHeader:
    """Parse the fixed 44-byte header written by encode_to_container."""
    if len(data) < WAV_HEADER_SIZE:
        raise ValueError(f"WAVE data too short: {len(data)} bytes")

    (riff, riff_size, wave, fmt, fmt_size, audio_format, channels, sample_rate,
     byte_rate, block_align, bits_per_sample, data_tag, data_size) = _HEADER_STRUCT.unpack_from(data)

    if riff != b'RIFF' or wave != b'WAVE' or fmt != b'fmt ' or data_tag != b'data':
        raise ValueError("Not a minimal RIFF/WAVE container")
    if fmt_size != 16:
        raise ValueError(f"Unexpected fmt chunk size: {fmt_size}")

    return WaveHeader(
        riff_size=riff_size,
        audio_format=audio_format,
        channels=channels,
        sample_rate=sample_rate,
        byte_rate=byte_rate,
        block_align=block_align,
        bits_per_sample=bits_per_sample,
        data_size=data_size
    )
