import asyncio
import math
import os
from typing import List, Optional

import ffmpeg
from loguru import logger

from mediascribe.exceptions import ExtractionException, FFmpegNotFoundException, ValidationException
from mediascribe.media.ffmpeg_tools import FFMPEG_NOT_FOUND_MESSAGE, get_video_duration, run_ffmpeg
from mediascribe.models import SampledFrame


def compute_sample_timestamps(duration: Optional[float], interval_seconds: float, max_frames: int) -> List[float]:
    """
    Timestamps (seconds) at which frames are grabbed.

    ``0, interval, 2*interval, ...`` capped at ``max_frames`` and never at or
    past the end of the video. An unknown or non-positive duration yields a
    single frame at 0.

    Example:
        >>> compute_sample_timestamps(37, 5, 6)
        [0.0, 5.0, 10.0, 15.0, 20.0, 25.0]
    """
    if interval_seconds <= 0:
        raise ValidationException("intervalSeconds must be greater than 0", error_code="INVALID_INTERVAL")
    if max_frames <= 0:
        raise ValidationException("maxFrames must be greater than 0", error_code="INVALID_MAX_FRAMES")

    if duration is None or not math.isfinite(duration) or duration <= 0:
        return [0.0]

    frame_count = min(max_frames, math.ceil(duration / interval_seconds))
    timestamps = []
    for i in range(frame_count):
        timestamp = float(i * interval_seconds)
        if timestamp >= duration:
            break
        timestamps.append(timestamp)
    return timestamps


def frame_filename(index: int, timestamp: float) -> str:
    return f"frame_{index}_{timestamp:.1f}s.jpg"


class FrameSampler:
    """Grabs still frames from a video at fixed intervals with ffmpeg."""

    def __init__(self, ffmpeg_path: Optional[str], ffprobe_path: Optional[str] = None):
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path

    def build_command(self, video_path: str, timestamp: float, output_path: str) -> list:
        stream = ffmpeg.input(video_path, ss=timestamp).output(
            output_path,
            vframes=1,
            **{"q:v": 2}
        )
        return stream.overwrite_output().compile(cmd=self.ffmpeg_path)

    async def _grab(self, video_path: str, frame: SampledFrame) -> SampledFrame:
        await run_ffmpeg(
            self.build_command(video_path, frame.timestamp_seconds, frame.path),
            f"frame grab at {frame.timestamp_seconds:.1f}s",
        )
        # ffmpeg exits 0 without writing anything when seeking past the last frame
        if not os.path.exists(frame.path) or os.path.getsize(frame.path) == 0:
            raise ExtractionException(
                f"FFmpeg execution failed during frame grab: no frame at {frame.timestamp_seconds:.1f}s in {video_path}",
                error_code="FFMPEG_NO_OUTPUT",
                details={"video_path": video_path, "timestamp": frame.timestamp_seconds},
            )
        return frame

    async def sample(
        self,
        video_path: str,
        output_dir: str,
        interval_seconds: float = 5,
        max_frames: int = 6,
    ) -> List[SampledFrame]:
        """
        Extract frames from ``video_path`` into ``output_dir``.

        All grabs run concurrently. The call waits for every grab to settle
        and then raises the first failure; a missing frame cannot be
        substituted.

        Raises:
            ValidationException: Non-positive interval or frame cap
            FFmpegNotFoundException: ffmpeg is not available
            ExtractionException: A frame grab failed
        """
        if not self.ffmpeg_path:
            raise FFmpegNotFoundException(FFMPEG_NOT_FOUND_MESSAGE, error_code="FFMPEG_NOT_FOUND")
        # Validate before probing so bad arguments fail fast
        compute_sample_timestamps(None, interval_seconds, max_frames)

        duration = await get_video_duration(video_path, self.ffprobe_path)
        timestamps = compute_sample_timestamps(duration, interval_seconds, max_frames)
        if duration is None or duration <= 0:
            logger.warning(f"Video duration unavailable for {video_path}, sampling a single frame at 0s")

        os.makedirs(output_dir, exist_ok=True)
        frames = [
            SampledFrame(index=i, timestamp_seconds=ts, path=os.path.join(output_dir, frame_filename(i, ts)))
            for i, ts in enumerate(timestamps)
        ]
        logger.info(f"Extracting {len(frames)} frames at {interval_seconds}s intervals from {video_path}")

        results = await asyncio.gather(
            *(self._grab(video_path, frame) for frame in frames),
            return_exceptions=True
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(f"{len(failures)} of {len(frames)} frame grabs failed for {video_path}")
            raise failures[0]

        logger.info(f"Successfully extracted {len(frames)} frames")
        return frames
