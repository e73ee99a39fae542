"""
Providers Module

The media processing contract and its in-process implementation.
"""

from .media_provider import (
    MediaProcessingProvider,
    ProcessingResult,
    Metrics
)
from .local_provider import LocalMediaProvider

__all__ = [
    "MediaProcessingProvider",
    "ProcessingResult",
    "Metrics",
    "LocalMediaProvider"
]
