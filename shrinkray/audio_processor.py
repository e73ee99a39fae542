#!/usr/bin/env python3

"""
Audio Decoder

Turns an arbitrary audio upload into canonical samples by handing the bytes
to an external ffmpeg process through a pair of temporary files.
"""

import asyncio
import logging
import os
import shutil
import tempfile
import uuid
from typing import List, Optional

import aiofiles
import aiofiles.os

from .codec import CANONICAL_SAMPLE_RATE, RawAudioSamples, samples_from_float32le
from .errors import DecodeError

logger = logging.getLogger(__name__)

_STDERR_TAIL = 500


class AudioDecoder:
    """Decodes uploads to mono float32 PCM at the canonical sample rate"""

    def __init__(self,
                 ffmpeg_binary: str = "ffmpeg",
                 temp_dir: Optional[str] = None,
                 sample_rate: int = CANONICAL_SAMPLE_RATE):
        self.ffmpeg_binary = ffmpeg_binary
        self.temp_dir = temp_dir or tempfile.gettempdir()
        self.sample_rate = sample_rate

    def is_available(self) -> bool:
        """Check whether the decoder binary can be found"""
        return shutil.which(self.ffmpeg_binary) is not None

    def build_command(self, input_path: str, output_path: str) -> List[str]:
        return [
            self.ffmpeg_binary,
            "-i", input_path,
            "-f", "f32le",
            "-acodec", "pcm_f32le",
            "-ac", "1",
            "-ar", str(self.sample_rate),
            "-y",
            output_path
        ]

    async def decode_to_canonical(self, data: bytes) -> RawAudioSamples:
        """
        Decode arbitrary audio bytes to canonical samples

        Args:
            data: Uploaded audio in any container/codec ffmpeg understands

        Returns:
            Mono float32 samples at the decoder's sample rate

        Raises:
            DecodeError: ffmpeg could not be launched, exited nonzero, or
                produced a truncated sample stream
        """
        token = uuid.uuid4().hex
        input_path = os.path.join(self.temp_dir, f"{token}.audio")
        output_path = os.path.join(self.temp_dir, f"{token}.raw")

        try:
            async with aiofiles.open(input_path, "wb") as f:
                await f.write(data)

            await self._run_decoder(input_path, output_path)

            async with aiofiles.open(output_path, "rb") as f:
                raw = await f.read()

            audio = samples_from_float32le(raw, self.sample_rate)
            logger.debug(f"Decoded {len(data)} bytes to {len(audio)} samples at {self.sample_rate} Hz")
            return audio

        finally:
            await self._cleanup_temp_file(input_path)
            await self._cleanup_temp_file(output_path)

    async def _run_decoder(self, input_path: str, output_path: str) -> None:
        cmd = self.build_command(input_path, output_path)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            logger.error(f"Failed to launch decoder {self.ffmpeg_binary}: {e}")
            raise DecodeError(f"Failed to launch {self.ffmpeg_binary}: {e}") from e

        _, stderr = await process.communicate()

        if process.returncode != 0:
            detail = stderr.decode(errors="replace").strip()[-_STDERR_TAIL:] if stderr else ""
            logger.error(f"Decoder exited with code {process.returncode}: {detail}")
            raise DecodeError(
                f"ffmpeg exited with code {process.returncode}",
                exit_code=process.returncode
            )

    async def _cleanup_temp_file(self, file_path: str) -> None:
        """Best-effort removal; failures are logged and never raised"""
        try:
            await aiofiles.os.remove(file_path)
            logger.debug(f"Cleaned up temporary file: {file_path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not clean up temporary file {file_path}: {e}")
