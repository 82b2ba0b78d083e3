import os
from typing import Optional

import ffmpeg
from loguru import logger

from mediascribe.exceptions import ExtractionException, FFmpegNotFoundException, FileTooLargeException
from mediascribe.media.ffmpeg_tools import FFMPEG_NOT_FOUND_MESSAGE, run_ffmpeg
from mediascribe.models import ExtractionResult, FileSizeInfo
from mediascribe.utils.execution_timer import ExecutionTimer

BYTES_PER_MB = 1024 * 1024

# Upload ceiling of the speech-to-text API
MAX_TRANSCRIPTION_UPLOAD_MB = 25


class AudioExtractor:
    """Produces a mono, low-bitrate mp3 from any media file with ffmpeg."""

    def __init__(self, ffmpeg_path: Optional[str], bitrate: str = "64k", sample_rate: int = 16000):
        self.ffmpeg_path = ffmpeg_path
        self.bitrate = bitrate
        self.sample_rate = sample_rate

    def build_command(self, input_path: str, output_path: str) -> list:
        stream = ffmpeg.input(input_path).output(
            output_path,
            vn=None,
            ac=1,
            ar=self.sample_rate,
            acodec="libmp3lame",
            audio_bitrate=self.bitrate,
            format="mp3",
        )
        return stream.overwrite_output().compile(cmd=self.ffmpeg_path)

    async def extract(self, input_path: str, output_path: str) -> ExtractionResult:
        """
        Extract the audio track of ``input_path`` into ``output_path``.

        Raises:
            FFmpegNotFoundException: ffmpeg is not available
            ExtractionException: ffmpeg ran but did not produce usable audio
        """
        if not self.ffmpeg_path:
            logger.error("FFmpeg not configured")
            raise FFmpegNotFoundException(FFMPEG_NOT_FOUND_MESSAGE, error_code="FFMPEG_NOT_FOUND")

        logger.info(f"Extracting audio from video: {input_path} -> {output_path} (mp3, {self.bitrate}, mono)")
        with ExecutionTimer() as timer:
            await run_ffmpeg(self.build_command(input_path, output_path), "audio extraction")

        if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
            raise ExtractionException(
                f"FFmpeg execution failed during audio extraction: no audio was written to {output_path}. "
                "The source may not contain an audio track.",
                error_code="FFMPEG_NO_OUTPUT",
                details={"input_path": input_path, "output_path": output_path},
            )

        output_size = os.path.getsize(output_path)
        input_size = os.path.getsize(input_path)
        reduction = (1 - output_size / input_size) * 100 if input_size else 0.0
        result = ExtractionResult(
            duration_ms=max(timer.elapsed_ms, 1),
            output_size_bytes=output_size,
            output_size_mb=output_size / BYTES_PER_MB,
            input_size_mb=input_size / BYTES_PER_MB,
            size_reduction_percent=round(reduction, 1),
        )
        logger.info(
            f"Audio extracted successfully in {result.duration_ms}ms: "
            f"{result.input_size_mb:.2f}MB -> {result.output_size_mb:.2f}MB ({result.size_reduction_percent}% smaller)"
        )
        return result


def validate_file_size(path: str, limit_mb: float = MAX_TRANSCRIPTION_UPLOAD_MB) -> FileSizeInfo:
    """Check the file that will actually be uploaded against the API ceiling."""
    size_bytes = os.path.getsize(path)
    size_mb = size_bytes / BYTES_PER_MB
    if size_mb > limit_mb:
        logger.error(f"Audio file too large: {size_mb:.2f}MB (limit {limit_mb:g}MB): {path}")
        raise FileTooLargeException(size_mb=size_mb, limit_mb=limit_mb, path=path)
    logger.info(f"File size check passed: {size_mb:.2f}MB (limit {limit_mb:g}MB)")
    return FileSizeInfo(size_bytes=size_bytes, size_mb=size_mb)


def estimate_audio_duration(size_mb: float) -> Optional[float]:
    """Rough minutes estimate from file size (~10MB per minute). None when empty."""
    if size_mb <= 0:
        return None
    return round(size_mb / 10, 2)
