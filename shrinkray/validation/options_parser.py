#!/usr/bin/env python3

"""
Options Parser

Converts wire fields into per-domain TransformOptions. Missing or empty
fields take their defaults; values that are present but malformed or out of
range are rejected with a client-facing message.
"""

import math
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from ..errors import InputError
from ..functional.result_monad import Result, Success, Failure
from ..pipeline.options import AudioOptions, ImageOptions, TextOptions

_TRUTHY = {"true", "1", "yes", "on"}
_FALSY = {"false", "0", "no", "off"}
_FORMAT_ALIASES = {"jpeg": "jpg"}

def _field(fields: Mapping[str, Any], name: str) -> Optional[str]:
    value = fields.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None

def _parse_float(fields: Mapping[str, Any], name: str, default: float) -> float:
    raw = _field(fields, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InputError(f"Invalid numeric value for '{name}': {raw}")
    if not math.isfinite(value):
        raise InputError(f"Invalid numeric value for '{name}': {raw}")
    return value

def _parse_int(fields: Mapping[str, Any], name: str, default: int) -> int:
    # Fractional input truncates toward zero
    return int(_parse_float(fields, name, float(default)))

def _parse_bool(fields: Mapping[str, Any], name: str, default: bool) -> bool:
    raw = _field(fields, name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise InputError(f"Invalid boolean value for '{name}': {raw}")

def _require(condition: bool, message: str) -> None:
    if not condition:
        raise InputError(message)

def parse_audio_options(fields: Mapping[str, Any]) -> Result[AudioOptions, str]:
    try:
        options = AudioOptions(
            speedup=_parse_float(fields, "speedup", 1.0),
            volume=_parse_float(fields, "volume", 1.0),
            normalize=_parse_bool(fields, "normalize", False),
            remove_silence=_parse_bool(fields, "removeSilence", False),
            threshold_db=_parse_float(fields, "thresholdDb", -40.0),
            min_duration_ms=_parse_float(fields, "minDurationMs", 100.0)
        )
        _require(options.speedup > 0, "'speedup' must be greater than 0")
        _require(options.volume >= 0, "'volume' must not be negative")
        _require(options.min_duration_ms >= 0, "'minDurationMs' must not be negative")
    except InputError as e:
        return Failure(str(e))
    return Success(options)

def parse_image_options(fields: Mapping[str, Any]) -> Result[ImageOptions, str]:
    try:
        fmt = (_field(fields, "format") or "jpg").lower()
        options = ImageOptions(
            width=_parse_int(fields, "width", 0),
            height=_parse_int(fields, "height", 0),
            quality=_parse_int(fields, "quality", 85),
            format=_FORMAT_ALIASES.get(fmt, fmt)
        )
        _require(options.width >= 0, "'width' must not be negative")
        _require(options.height >= 0, "'height' must not be negative")
        _require(1 <= options.quality <= 100, "'quality' must be between 1 and 100")
    except InputError as e:
        return Failure(str(e))
    return Success(options)

class TextRequest(BaseModel):
    """JSON body of a text reduction request"""
    text: Optional[str] = Field(default=None, description="Text to reduce")
    trim: bool = Field(default=False, description="Strip leading and trailing whitespace")
    minify: bool = Field(default=False, description="Collapse whitespace and drop blank lines")
    compression: Literal["none", "gzip", "brotli"] = Field(default="none", description="Output compression")

    @field_validator("compression", mode="before")
    @classmethod
    def normalize_compression(cls, value: Any) -> Any:
        if not value:
            return "none"
        if isinstance(value, str):
            return value.strip().lower()
        return value

def parse_text_options(request: TextRequest) -> Result[TextOptions, str]:
    """Check the text is present; the text itself travels separately as the payload"""
    if not request.text:
        return Failure("Text is required")

    return Success(TextOptions(
        trim=request.trim,
        minify=request.minify,
        compression=request.compression
    ))
