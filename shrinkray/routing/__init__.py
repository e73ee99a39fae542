"""
Routing Module

HTTP request handlers for the audio, image and text endpoints.
"""

from .media_router import (
    MediaRouter,
    RequestPhase,
    IMAGE_MIME_TYPES,
    create_media_router
)

__all__ = [
    "MediaRouter",
    "RequestPhase",
    "IMAGE_MIME_TYPES",
    "create_media_router"
]
