#!/usr/bin/env python3

"""
Upload Validator

Checks multipart file uploads before any decoding or processing happens.
Each check is a small function returning a Result; the validator runs them
in order and stops at the first failure.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from fastapi import UploadFile

from ..functional.result_monad import Result, Success, Failure

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class UploadValidationConfig:
    """Limits applied to uploaded files"""
    max_file_size: int = 50 * 1024 * 1024
    allow_empty: bool = False

@dataclass(frozen=True)
class UploadIssue:
    """Why an upload was rejected, with the HTTP status to report"""
    message: str
    status_code: int = 400

@dataclass(frozen=True)
class UploadedFile:
    """An upload that passed validation"""
    data: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

UploadCheck = Callable[[UploadedFile, UploadValidationConfig], Result[UploadedFile, UploadIssue]]

class UploadValidator:
    """Runs upload checks in sequence"""

    def __init__(self, config: Optional[UploadValidationConfig] = None):
        self.config = config or UploadValidationConfig()
        self._checks: List[UploadCheck] = [self._check_size]
        if not self.config.allow_empty:
            self._checks.append(self._check_not_empty)

    def add_check(self, check: UploadCheck) -> 'UploadValidator':
        self._checks.append(check)
        return self

    async def validate(self, upload: Optional[UploadFile]) -> Result[UploadedFile, UploadIssue]:
        """Read and validate an upload; a missing file is rejected up front"""
        if upload is None:
            return Failure(UploadIssue("No file uploaded"))

        declared_size = getattr(upload, 'size', None)
        if declared_size is not None and declared_size > self.config.max_file_size:
            return Failure(self._too_large(declared_size))

        uploaded = UploadedFile(
            data=await upload.read(),
            filename=upload.filename,
            content_type=upload.content_type
        )

        for check in self._checks:
            result = check(uploaded, self.config)
            if result.is_failure():
                logger.warning(f"Upload rejected ({uploaded.filename}): {result.get_error().message}")
                return result

        logger.debug(f"Upload accepted: {uploaded.filename} ({uploaded.size} bytes)")
        return Success(uploaded)

    def _check_size(self, uploaded: UploadedFile, config: UploadValidationConfig) -> Result[UploadedFile, UploadIssue]:
        if uploaded.size > config.max_file_size:
            return Failure(self._too_large(uploaded.size))
        return Success(uploaded)

    def _check_not_empty(self, uploaded: UploadedFile, config: UploadValidationConfig) -> Result[UploadedFile, UploadIssue]:
        if uploaded.size == 0:
            return Failure(UploadIssue("Uploaded file is empty"))
        return Success(uploaded)

    def _too_large(self, size: int) -> UploadIssue:
        max_mb = self.config.max_file_size / (1024 * 1024)
        actual_mb = size / (1024 * 1024)
        return UploadIssue(
            f"File too large: {actual_mb:.1f}MB exceeds limit of {max_mb:.1f}MB",
            status_code=413
        )

def create_upload_validator(max_size_mb: float = 50.0) -> UploadValidator:
    """Create an upload validator with the given size limit"""
    return UploadValidator(UploadValidationConfig(max_file_size=int(max_size_mb * 1024 * 1024)))
