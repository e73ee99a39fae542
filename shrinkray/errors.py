#!/usr/bin/env python3

"""
Error Types

Exception taxonomy shared by the decode adapter, the pipeline and the
request handlers. Handlers map InputError to 4xx and everything else to 500.
"""

from typing import Optional


class ShrinkrayError(Exception):
    """Base error for payload reduction requests."""


class InputError(ShrinkrayError):
    """Raised when the client sent missing or malformed fields."""


class DecodeError(ShrinkrayError):
    """Raised when the external decoder exits nonzero or cannot be launched."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class ExecutionError(ShrinkrayError):
    """Raised when the media provider rejects or fails a pipeline run."""


class StalePipelineError(ShrinkrayError):
    """Raised when a superseded or already-run pipeline value is used again."""
