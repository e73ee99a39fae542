#!/usr/bin/env python3

"""
Transform Options

Per-domain records of user-tunable parameters, parsed once per request.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from .stages import Domain

IMAGE_FORMATS = ("jpg", "png", "webp")
TEXT_COMPRESSIONS = ("gzip", "brotli")

@dataclass(frozen=True)
class AudioOptions:
    domain: ClassVar[Domain] = Domain.AUDIO

    speedup: float = 1.0
    volume: float = 1.0
    normalize: bool = False
    remove_silence: bool = False
    threshold_db: float = -40.0
    min_duration_ms: float = 100.0

@dataclass(frozen=True)
class ImageOptions:
    domain: ClassVar[Domain] = Domain.IMAGE

    width: int = 0
    height: int = 0
    quality: int = 85
    format: str = "jpg"

@dataclass(frozen=True)
class TextOptions:
    domain: ClassVar[Domain] = Domain.TEXT

    trim: bool = False
    minify: bool = False
    compression: str = "none"

TransformOptions = Union[AudioOptions, ImageOptions, TextOptions]
