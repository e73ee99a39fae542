#!/usr/bin/env python3

"""
Local Media Provider

In-process implementation of the media processing contract. Audio stages
run on numpy arrays, image stages on Pillow images and text stages on plain
strings; all of it happens on a worker thread pool so request handlers stay
responsive while a pipeline runs.
"""

import asyncio
import io
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Tuple, Union

import numpy as np
from PIL import Image

from ..codec import CANONICAL_SAMPLE_RATE, samples_from_float32le
from ..functional.result_monad import Result, Success, Failure, from_async_callable
from ..pipeline.stages import Domain, StageDescriptor
from .effects import remove_silence, change_speed, normalize_peak, minify_text, compress_text
from .media_provider import MediaProcessingProvider, ProcessingResult, Metrics

logger = logging.getLogger(__name__)

_PIL_FORMATS = {"jpg": "JPEG", "png": "PNG", "webp": "WEBP"}
_LOSSY_PIL_FORMATS = ("JPEG", "WEBP")
_WRITABLE_MODES = {
    "JPEG": ("L", "RGB"),
    "PNG": ("1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"),
    "WEBP": ("RGB", "RGBA"),
}

class LocalMediaProvider(MediaProcessingProvider):
    """Executes pipelines in-process on a thread pool"""

    def __init__(self, max_workers: int = 2, sample_rate: int = CANONICAL_SAMPLE_RATE):
        self.max_workers = max_workers
        self.sample_rate = sample_rate
        self._executor: Optional[ThreadPoolExecutor] = None
        self._processors: Dict[Domain, Callable[[Any, Tuple[StageDescriptor, ...]], ProcessingResult]] = {
            Domain.AUDIO: self._process_audio,
            Domain.IMAGE: self._process_image,
            Domain.TEXT: self._process_text,
        }
        self._runs = 0

    async def initialize(self) -> Result[None, str]:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="media-")
            logger.info(f"Local media provider started with {self.max_workers} workers")
        return Success(None)

    async def shutdown(self) -> Result[None, str]:
        if self._executor:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
            logger.info("Local media provider stopped")
        return Success(None)

    async def execute(self,
                      domain: Domain,
                      payload: Union[bytes, str],
                      stages: Tuple[StageDescriptor, ...]) -> Result[ProcessingResult, str]:
        processor = self._processors.get(domain)
        if processor is None:
            return Failure(f"Unsupported domain: {domain}")

        start_time = time.time()
        loop = asyncio.get_running_loop()
        outcome = await from_async_callable(
            lambda: loop.run_in_executor(self._executor, processor, payload, stages),
            error_mapper=lambda e: f"{domain.value.capitalize()} processing failed: {e}"
        )
        if outcome.is_failure():
            logger.error(outcome.get_error())
            return outcome

        result = outcome.get_value()
        self._runs += 1
        logger.debug(f"{domain.value} pipeline {list(result.operations)} took {time.time() - start_time:.3f}s")
        return Success(result)

    async def health_check(self) -> Result[Dict[str, Any], str]:
        return Success({
            "provider": "local",
            "executor_active": self._executor is not None,
            "max_workers": self.max_workers,
            "runs": self._runs
        })

    def _process_audio(self, payload: bytes, stages: Tuple[StageDescriptor, ...]) -> ProcessingResult:
        audio = samples_from_float32le(payload, self.sample_rate)
        sample_rate = audio.sample_rate
        samples = np.array(audio.samples, dtype=np.float32)
        original_duration = audio.duration
        silence_removed = 0.0
        operations = []

        for stage in stages:
            if stage.name == "removeSilence":
                before = samples.size
                samples = remove_silence(
                    samples,
                    sample_rate,
                    float(stage.param("thresholdDb", -40.0)),
                    float(stage.param("minDurationMs", 100.0))
                )
                silence_removed += (before - samples.size) / sample_rate
            elif stage.name == "speedup":
                samples = change_speed(samples, float(stage.param("factor", 1.0)))
            elif stage.name == "volume":
                samples = (samples * float(stage.param("factor", 1.0))).astype(np.float32)
            elif stage.name == "normalize":
                samples = normalize_peak(samples)
            else:
                raise ValueError(f"Unknown audio stage: {stage.name}")
            operations.append(stage.name)

        data = samples.astype('<f4').tobytes()
        return ProcessingResult(
            data=data,
            metrics=Metrics.from_sizes(len(payload), len(data)),
            details={
                "duration": samples.size / sample_rate,
                "sampleRate": sample_rate,
                "originalDuration": original_duration,
                "silenceRemoved": silence_removed
            },
            operations=tuple(operations)
        )

    def _process_image(self, payload: bytes, stages: Tuple[StageDescriptor, ...]) -> ProcessingResult:
        image = Image.open(io.BytesIO(payload))
        image.load()
        original_width, original_height = image.size
        output_format = _normalize_image_format(image.format)
        quality = None
        operations = []

        for stage in stages:
            if stage.name == "resize":
                size = (int(stage.param("width")), int(stage.param("height")))
                image = image.resize(size, Image.Resampling.LANCZOS)
            elif stage.name == "quality":
                quality = int(stage.param("quality"))
            elif stage.name == "format":
                output_format = _normalize_image_format(stage.param("format"))
            else:
                raise ValueError(f"Unknown image stage: {stage.name}")
            operations.append(stage.name)

        pil_format = _PIL_FORMATS.get(output_format, output_format.upper())
        image = _ensure_writable_mode(image, pil_format)
        save_kwargs: Dict[str, Any] = {}
        if quality is not None and pil_format in _LOSSY_PIL_FORMATS:
            save_kwargs["quality"] = quality
        if pil_format == "PNG":
            save_kwargs["optimize"] = True

        buffer = io.BytesIO()
        image.save(buffer, format=pil_format, **save_kwargs)
        data = buffer.getvalue()

        return ProcessingResult(
            data=data,
            metrics=Metrics.from_sizes(len(payload), len(data)),
            details={
                "width": image.width,
                "height": image.height,
                "originalWidth": original_width,
                "originalHeight": original_height,
                "format": output_format
            },
            operations=tuple(operations)
        )

    def _process_text(self, payload: str, stages: Tuple[StageDescriptor, ...]) -> ProcessingResult:
        data: Union[str, bytes] = payload
        compression = "none"
        operations = []

        for stage in stages:
            if isinstance(data, bytes):
                raise ValueError(f"Stage {stage.name} cannot follow compression")
            if stage.name == "trim":
                data = data.strip()
            elif stage.name == "minify":
                data = minify_text(data)
            elif stage.name == "compress":
                compression = str(stage.param("algorithm"))
                data = compress_text(data, compression)
            else:
                raise ValueError(f"Unknown text stage: {stage.name}")
            operations.append(stage.name)

        final_size = len(data) if isinstance(data, bytes) else len(data.encode('utf-8'))
        return ProcessingResult(
            data=data,
            metrics=Metrics.from_sizes(len(payload.encode('utf-8')), final_size),
            details={
                "originalLength": len(payload),
                "finalLength": len(data),
                "compression": compression
            },
            operations=tuple(operations)
        )

def _normalize_image_format(name: Optional[str]) -> str:
    fmt = (name or "png").lower()
    return "jpg" if fmt == "jpeg" else fmt

def _ensure_writable_mode(image: Image.Image, pil_format: str) -> Image.Image:
    """Convert to RGB, or RGBA when alpha survives, if the encoder cannot write the mode"""
    writable = _WRITABLE_MODES.get(pil_format)
    if writable is None or image.mode in writable:
        return image

    has_alpha = "A" in image.getbands() or "transparency" in image.info
    if has_alpha and "RGBA" in writable:
        return image.convert("RGBA")
    return image.convert("RGB")
