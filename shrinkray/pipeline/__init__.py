"""
Pipeline Module

Stage descriptors, persistent pipeline values and the per-domain builder.
"""

from .stages import Domain, StageDescriptor, Pipeline
from .options import (
    AudioOptions,
    ImageOptions,
    TextOptions,
    TransformOptions,
    IMAGE_FORMATS,
    TEXT_COMPRESSIONS
)
from .builder import (
    StageRule,
    AUDIO_STAGES,
    IMAGE_STAGES,
    TEXT_STAGES,
    STAGE_TABLES,
    build_pipeline
)

__all__ = [
    "Domain",
    "StageDescriptor",
    "Pipeline",
    "AudioOptions",
    "ImageOptions",
    "TextOptions",
    "TransformOptions",
    "IMAGE_FORMATS",
    "TEXT_COMPRESSIONS",
    "StageRule",
    "AUDIO_STAGES",
    "IMAGE_STAGES",
    "TEXT_STAGES",
    "STAGE_TABLES",
    "build_pipeline"
]
