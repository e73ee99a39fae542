"""
Validation Module

Upload checks and wire-to-options parsing.
"""

from .upload_validator import (
    UploadValidator,
    UploadValidationConfig,
    UploadIssue,
    UploadedFile,
    create_upload_validator
)
from .options_parser import (
    parse_audio_options,
    parse_image_options,
    parse_text_options,
    TextRequest
)

__all__ = [
    "UploadValidator",
    "UploadValidationConfig",
    "UploadIssue",
    "UploadedFile",
    "create_upload_validator",
    "parse_audio_options",
    "parse_image_options",
    "parse_text_options",
    "TextRequest"
]
