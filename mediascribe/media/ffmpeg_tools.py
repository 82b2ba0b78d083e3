"""
Thin async wrappers around the ffmpeg / ffprobe binaries.

Commands are built with ffmpeg-python and executed with
``asyncio.create_subprocess_exec`` so the event loop is never blocked.
"""

import asyncio
import math
import os
import shutil
from typing import List, Optional

import ffmpeg
from loguru import logger

from mediascribe.exceptions import ExtractionException, FFmpegNotFoundException

FFMPEG_SEARCH_PATHS = (
    "/usr/local/bin/ffmpeg",
    "/opt/homebrew/bin/ffmpeg",
    "/usr/bin/ffmpeg",
)

FFMPEG_NOT_FOUND_MESSAGE = (
    "FFmpeg is not installed or not found. Please install ffmpeg (brew install ffmpeg on macOS, "
    "apt-get install ffmpeg on Linux) and ensure it's in your PATH."
)


def _is_executable(path: Optional[str]) -> bool:
    return bool(path) and os.path.isfile(path) and os.access(path, os.X_OK)


def locate_ffmpeg(explicit_path: Optional[str] = None) -> Optional[str]:
    """
    Find the ffmpeg binary.

    Order: explicit path, the standard install locations, then PATH lookup.
    Returns None when ffmpeg is unavailable.
    """
    if explicit_path:
        if _is_executable(explicit_path):
            return explicit_path
        resolved = shutil.which(explicit_path)
        if resolved:
            return resolved
        logger.warning(f"Configured FFMPEG_PATH {explicit_path} is not executable, searching defaults")

    for candidate in FFMPEG_SEARCH_PATHS:
        if _is_executable(candidate):
            return candidate

    return shutil.which("ffmpeg")


def locate_ffprobe(ffmpeg_path: Optional[str] = None, explicit_path: Optional[str] = None) -> Optional[str]:
    """Find ffprobe, preferring the binary next to the ffmpeg that was found."""
    if explicit_path:
        if _is_executable(explicit_path):
            return explicit_path
        resolved = shutil.which(explicit_path)
        if resolved:
            return resolved
    if ffmpeg_path:
        sibling = os.path.join(os.path.dirname(ffmpeg_path), "ffprobe")
        if _is_executable(sibling):
            return sibling
    return shutil.which("ffprobe")


async def run_ffmpeg(args: List[str], description: str) -> None:
    """
    Run a compiled ffmpeg command.

    Raises:
        FFmpegNotFoundException: If the binary cannot be executed
        ExtractionException: If ffmpeg exits with a non-zero status
    """
    logger.debug(f"Starting: {description}: {' '.join(args)}")
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except (FileNotFoundError, PermissionError) as e:
        raise FFmpegNotFoundException(
            FFMPEG_NOT_FOUND_MESSAGE,
            error_code="FFMPEG_NOT_FOUND",
            details={"command": args[0], "original_exception": type(e).__name__},
        ) from e

    try:
        _, err = await process.communicate()
    except asyncio.CancelledError:
        logger.warning(f"{description} cancelled, killing ffmpeg (pid {process.pid})")
        if process.returncode is None:
            process.kill()
        await process.wait()
        raise
    if process.returncode != 0:
        stderr_tail = err.decode(errors="replace").strip()[-1000:]
        logger.error(f"{description} failed with exit code {process.returncode}: {stderr_tail}")
        raise ExtractionException(
            f"FFmpeg execution failed during {description} (exit code {process.returncode}): {stderr_tail}",
            error_code="FFMPEG_FAILED",
            details={"returncode": process.returncode},
        )
    logger.debug(f"{description} completed successfully.")


def _probe_duration(video_path: str, ffprobe_path: str) -> float:
    probe = ffmpeg.probe(video_path, cmd=ffprobe_path)
    candidates = [probe.get("format", {}).get("duration")]
    candidates += [
        stream.get("duration")
        for stream in probe.get("streams", [])
        if stream.get("codec_type") == "video"
    ]
    for value in candidates:
        try:
            duration = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(duration):
            return duration
    return 0.0


async def get_video_duration(video_path: str, ffprobe_path: Optional[str]) -> Optional[float]:
    """
    Duration of a media file in seconds.

    Returns None when ffprobe is unavailable or cannot read the file; callers
    treat that the same as an unknown duration.
    """
    if not ffprobe_path:
        logger.warning("ffprobe not found; video duration is unknown")
        return None
    try:
        duration = await asyncio.to_thread(_probe_duration, video_path, ffprobe_path)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode(errors="replace").strip() if e.stderr else str(e)
        logger.warning(f"ffprobe could not read {video_path}: {stderr}")
        return None
    except (OSError, ValueError) as e:
        logger.warning(f"ffprobe failed for {video_path}: {e}")
        return None
    logger.info(f"Video duration: {duration:.2f} seconds")
    return duration
