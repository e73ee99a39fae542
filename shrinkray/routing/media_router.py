#!/usr/bin/env python3

"""
Media Router

HTTP handlers for the audio, image and text endpoints. Each request walks
parse -> (decode) -> build -> execute -> serialize; client mistakes end in a
400-class JSON error, anything failing after parsing ends in a 500 with the
failure message. No partial payload is ever returned.
"""

import base64
import json
import logging
import uuid
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response

from ..audio_processor import AudioDecoder
from ..codec import encode_to_container, samples_from_float32le, samples_to_float32le
from ..errors import ExecutionError
from ..pipeline import Domain, Pipeline, build_pipeline
from ..providers import MediaProcessingProvider, ProcessingResult
from ..validation import (
    TextRequest,
    UploadValidator,
    create_upload_validator,
    parse_audio_options,
    parse_image_options,
    parse_text_options
)

logger = logging.getLogger(__name__)

IMAGE_MIME_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}

class RequestPhase(Enum):
    """Steps a request passes through"""
    RECEIVED = "received"
    PARSED = "parsed"
    DECODED = "decoded"
    BUILT = "built"
    EXECUTED = "executed"
    SERIALIZED = "serialized"

def _header_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))

class MediaRouter:
    """Router class for the payload reduction endpoints"""

    def __init__(self,
                 provider: MediaProcessingProvider,
                 decoder: AudioDecoder,
                 upload_validator: Optional[UploadValidator] = None):
        self.provider = provider
        self.decoder = decoder
        self.upload_validator = upload_validator or create_upload_validator()

        self.router = APIRouter(
            prefix="/api",
            tags=["media"]
        )

        self._register_routes()

    def _register_routes(self) -> None:
        """Register all processing routes"""

        @self.router.post("/audio")
        async def process_audio(
            file: Optional[UploadFile] = File(None),
            speedup: Optional[str] = Form(None),
            volume: Optional[str] = Form(None),
            normalize: Optional[str] = Form(None),
            removeSilence: Optional[str] = Form(None),
            thresholdDb: Optional[str] = Form(None),
            minDurationMs: Optional[str] = Form(None)
        ):
            """Reduce an uploaded audio file and return it as 16-bit WAV"""
            return await self._handle_audio(file, {
                "speedup": speedup,
                "volume": volume,
                "normalize": normalize,
                "removeSilence": removeSilence,
                "thresholdDb": thresholdDb,
                "minDurationMs": minDurationMs
            })

        @self.router.post("/image")
        async def process_image(
            file: Optional[UploadFile] = File(None),
            width: Optional[str] = Form(None),
            height: Optional[str] = Form(None),
            quality: Optional[str] = Form(None),
            format: Optional[str] = Form(None)
        ):
            """Resize and recode an uploaded image"""
            return await self._handle_image(file, {
                "width": width,
                "height": height,
                "quality": quality,
                "format": format
            })

        @self.router.post("/text")
        async def process_text(request: TextRequest):
            """Trim, minify or compress a text payload"""
            return await self._handle_text(request)

    async def _handle_audio(self, file: Optional[UploadFile], fields: Dict[str, Optional[str]]) -> Response:
        request_id = uuid.uuid4().hex[:8]
        phase = RequestPhase.RECEIVED

        upload_result = await self.upload_validator.validate(file)
        if upload_result.is_failure():
            issue = upload_result.get_error()
            return self._client_error(request_id, Domain.AUDIO, issue.message, issue.status_code)

        options_result = parse_audio_options(fields)
        if options_result.is_failure():
            return self._client_error(request_id, Domain.AUDIO, options_result.get_error())

        upload = upload_result.get_value()
        phase = RequestPhase.PARSED

        try:
            audio = await self.decoder.decode_to_canonical(upload.data)
            phase = RequestPhase.DECODED

            pipeline = build_pipeline(options_result.get_value(), samples_to_float32le(audio))
            phase = RequestPhase.BUILT

            result = await self._execute(pipeline)
            phase = RequestPhase.EXECUTED

            sample_rate = int(result.details.get("sampleRate", audio.sample_rate))
            wav_data = encode_to_container(samples_from_float32le(result.data, sample_rate), sample_rate)
            headers = self._metadata_headers(result)
            headers["Content-Disposition"] = 'attachment; filename="processed.wav"'
            phase = RequestPhase.SERIALIZED

        except Exception as e:
            return self._server_error(request_id, Domain.AUDIO, phase, e)

        self._log_success(request_id, Domain.AUDIO, result)
        return Response(content=wav_data, media_type="audio/wav", headers=headers)

    async def _handle_image(self, file: Optional[UploadFile], fields: Dict[str, Optional[str]]) -> Response:
        request_id = uuid.uuid4().hex[:8]
        phase = RequestPhase.RECEIVED

        upload_result = await self.upload_validator.validate(file)
        if upload_result.is_failure():
            issue = upload_result.get_error()
            return self._client_error(request_id, Domain.IMAGE, issue.message, issue.status_code)

        options_result = parse_image_options(fields)
        if options_result.is_failure():
            return self._client_error(request_id, Domain.IMAGE, options_result.get_error())

        upload = upload_result.get_value()
        phase = RequestPhase.PARSED

        try:
            pipeline = build_pipeline(options_result.get_value(), upload.data)
            phase = RequestPhase.BUILT

            result = await self._execute(pipeline)
            phase = RequestPhase.EXECUTED

            output_format = str(result.details.get("format", options_result.get_value().format))
            media_type = IMAGE_MIME_TYPES.get(output_format, f"image/{output_format}")
            headers = self._metadata_headers(result)
            headers["Content-Disposition"] = f'attachment; filename="processed.{output_format}"'
            phase = RequestPhase.SERIALIZED

        except Exception as e:
            return self._server_error(request_id, Domain.IMAGE, phase, e)

        self._log_success(request_id, Domain.IMAGE, result)
        return Response(content=result.data, media_type=media_type, headers=headers)

    async def _handle_text(self, request: TextRequest) -> Response:
        request_id = uuid.uuid4().hex[:8]
        phase = RequestPhase.RECEIVED

        options_result = parse_text_options(request)
        if options_result.is_failure():
            return self._client_error(request_id, Domain.TEXT, options_result.get_error())
        phase = RequestPhase.PARSED

        try:
            pipeline = build_pipeline(options_result.get_value(), request.text)
            phase = RequestPhase.BUILT

            result = await self._execute(pipeline)
            phase = RequestPhase.EXECUTED

            details = dict(result.details)
            if isinstance(result.data, bytes):
                data = base64.b64encode(result.data).decode("ascii")
                details["encoding"] = "base64"
            else:
                data = result.data
                details["encoding"] = "utf-8"

            content = {
                "success": True,
                "data": data,
                "metrics": result.metrics.to_dict(),
                "details": details,
                "operations": list(result.operations)
            }
            phase = RequestPhase.SERIALIZED

        except Exception as e:
            return self._server_error(request_id, Domain.TEXT, phase, e)

        self._log_success(request_id, Domain.TEXT, result)
        return JSONResponse(content=content)

    async def _execute(self, pipeline: Pipeline) -> ProcessingResult:
        """Run the pipeline, raising ExecutionError when the provider rejects it"""
        run_result = await pipeline.run(self.provider)
        if run_result.is_failure():
            raise ExecutionError(run_result.get_error())
        return run_result.get_value()

    def _metadata_headers(self, result: ProcessingResult) -> Dict[str, str]:
        return {
            "X-Metrics": _header_json(result.metrics.to_dict()),
            "X-Details": _header_json(result.details),
            "X-Operations": _header_json(list(result.operations))
        }

    def _client_error(self, request_id: str, domain: Domain, message: str, status_code: int = 400) -> JSONResponse:
        logger.warning(f"[{request_id}] Rejected {domain.value} request: {message}")
        return JSONResponse(status_code=status_code, content={"error": message})

    def _server_error(self, request_id: str, domain: Domain, phase: RequestPhase, error: Exception) -> JSONResponse:
        logger.error(f"[{request_id}] {domain.value} request failed after {phase.value}: {error}")
        message = str(error) or f"Failed to process {domain.value}"
        return JSONResponse(status_code=500, content={"error": message})

    def _log_success(self, request_id: str, domain: Domain, result: ProcessingResult) -> None:
        logger.info(
            f"[{request_id}] {domain.value} processed: operations={list(result.operations)} "
            f"{result.metrics.original_size} -> {result.metrics.final_size} bytes"
        )

    def get_router(self) -> APIRouter:
        """Get the configured FastAPI router"""
        return self.router

def create_media_router(provider: MediaProcessingProvider,
                        decoder: AudioDecoder,
                        max_file_size_mb: float = 50.0) -> MediaRouter:
    """Create a media router with default upload validation"""
    return MediaRouter(
        provider=provider,
        decoder=decoder,
        upload_validator=create_upload_validator(max_size_mb=max_file_size_mb)
    )
