#!/usr/bin/env python3

"""
Media Effects

Pure transformation functions behind the local provider's stages.
"""

import gzip
import re

import brotli
import numpy as np

_HORIZONTAL_WHITESPACE = re.compile(r'[ \t\f\v]+')

def remove_silence(samples: np.ndarray,
                   sample_rate: int,
                   threshold_db: float,
                   min_duration_ms: float) -> np.ndarray:
    """Drop runs of quiet samples lasting at least min_duration_ms."""
    if samples.size == 0:
        return samples

    threshold = 10.0 ** (threshold_db / 20.0)
    silent = np.abs(samples) < threshold
    min_run = max(1, int(round(sample_rate * min_duration_ms / 1000.0)))

    # Rising and falling edges of the silent mask give [start, end) runs
    padded = np.concatenate(([False], silent, [False]))
    edges = np.flatnonzero(padded[1:] != padded[:-1])
    starts, ends = edges[0::2], edges[1::2]

    keep = np.ones(samples.size, dtype=bool)
    for start, end in zip(starts, ends):
        if end - start >= min_run:
            keep[start:end] = False

    return samples[keep]

def change_speed(samples: np.ndarray, factor: float) -> np.ndarray:
    """Resample to round(n / factor) samples by linear interpolation."""
    if factor <= 0:
        raise ValueError(f"Speed factor must be positive, got {factor}")
    if samples.size == 0 or factor == 1.0:
        return samples

    target = max(1, int(round(samples.size / factor)))
    positions = np.linspace(0, samples.size - 1, num=target)
    return np.interp(positions, np.arange(samples.size), samples).astype(np.float32)

def normalize_peak(samples: np.ndarray) -> np.ndarray:
    if samples.size == 0:
        return samples
    peak = float(np.max(np.abs(samples)))
    if peak == 0.0:
        return samples
    return (samples / peak).astype(np.float32)

def minify_text(text: str) -> str:
    """Collapse horizontal whitespace, strip each line and drop blank lines."""
    lines = (_HORIZONTAL_WHITESPACE.sub(' ', line).strip() for line in text.splitlines())
    return '\n'.join(line for line in lines if line)

def compress_text(text: str, algorithm: str) -> bytes:
    encoded = text.encode('utf-8')
    if algorithm == "gzip":
        return gzip.compress(encoded, mtime=0)
    if algorithm == "brotli":
        return brotli.compress(encoded)
    raise ValueError(f"Unsupported compression '{algorithm}'")
