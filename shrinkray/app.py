#!/usr/bin/env python3

"""
Shrinkray Server

FastAPI application exposing the payload reduction endpoints:
- /api/audio: decode, reduce and re-encode audio as 16-bit WAV
- /api/image: resize and recode images
- /api/text: trim, minify and compress text
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .audio_processor import AudioDecoder
from .config import ServerConfig, load_config, configure_logging
from .providers import LocalMediaProvider, MediaProcessingProvider
from .routing import create_media_router

logger = logging.getLogger(__name__)

class HealthResponse(BaseModel):
    status: str
    uptime: float
    ffmpeg: bool
    provider: Dict[str, Any]

def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message

def create_app(config: Optional[ServerConfig] = None,
               provider: Optional[MediaProcessingProvider] = None,
               decoder: Optional[AudioDecoder] = None) -> FastAPI:
    """Build the FastAPI application with its collaborators"""
    config = config or load_config()
    configure_logging(config.log_level)

    provider = provider or LocalMediaProvider(max_workers=config.provider_workers)
    decoder = decoder or AudioDecoder(ffmpeg_binary=config.ffmpeg_binary, temp_dir=config.temp_dir)
    started_at = time.time()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Shrinkray server")
        init_result = await provider.initialize()
        if init_result.is_failure():
            logger.error(f"Media provider initialization failed: {init_result.get_error()}")
        if not decoder.is_available():
            logger.warning(f"Decoder '{decoder.ffmpeg_binary}' not found; audio requests will fail")
        yield
        await provider.shutdown()
        logger.info("Shrinkray server stopped")

    app = FastAPI(
        title="Shrinkray",
        description="Reduces audio, image and text payloads before they reach downstream APIs",
        version="0.1.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Metrics", "X-Details", "X-Operations", "Content-Disposition"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.warning(f"Rejected malformed request to {request.url.path}: {message}")
        return JSONResponse(status_code=400, content={"error": message})

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        provider_health = await provider.health_check()
        if provider_health.is_failure():
            logger.warning(f"Media provider health check failed: {provider_health.get_error()}")

        return HealthResponse(
            status="healthy" if provider_health.is_success() else "degraded",
            uptime=time.time() - started_at,
            ffmpeg=decoder.is_available(),
            provider=provider_health.get_value() or {"error": provider_health.get_error()}
        )

    media_router = create_media_router(provider, decoder, max_file_size_mb=config.max_upload_mb)
    app.include_router(media_router.get_router())

    return app

def main():
    """Launch the server with uvicorn"""
    config = load_config()
    configure_logging(config.log_level)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower()
    )

if __name__ == "__main__":
    main()
