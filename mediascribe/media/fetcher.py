import asyncio
import os
import posixpath
from typing import Optional
from urllib.parse import urlparse

import aiofiles
import aiohttp
from loguru import logger

from mediascribe.exceptions import DownloadException
from mediascribe.models import DownloadResult
from mediascribe.utils.execution_timer import ExecutionTimer

CHUNK_SIZE = 1024 * 1024
BYTES_PER_MB = 1024 * 1024


def url_suffix(url: str, default: str = ".bin") -> str:
    """Lower-cased extension of the URL path, e.g. ``.mp3``; ``default`` if none."""
    try:
        path = urlparse(url).path
    except ValueError:
        return default
    ext = posixpath.splitext(path)[1].lower()
    # Guard against things like ".php?x" or absurdly long "extensions"
    if not ext or len(ext) > 6 or not ext[1:].isalnum():
        return default
    return ext


class MediaFetcher:
    """Streams a remote resource to a local path."""

    def __init__(self, timeout_seconds: float = 300.0, chunk_size: int = CHUNK_SIZE):
        self.timeout_seconds = timeout_seconds
        self.chunk_size = chunk_size

    async def download(self, url: str, output_path: str) -> DownloadResult:
        """
        Download ``url`` into ``output_path``.

        Args:
            url: Remote media URL
            output_path: Local destination; overwritten if it exists

        Returns:
            DownloadResult: Size, declared content type and timing

        Raises:
            DownloadException: On network error, timeout or non-2xx status
        """
        logger.info(f"Downloading file from URL: {url} -> {output_path} (timeout {self.timeout_seconds}s)")
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        content_length = None
        with ExecutionTimer() as timer:
            try:
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    async with session.get(url) as response:
                        if response.status >= 400:
                            body = await response.text(errors="replace")
                            raise DownloadException(
                                f"Request failed with status code {response.status}",
                                error_code="DOWNLOAD_HTTP_ERROR",
                                details={"url": url, "status": response.status, "body": body[:500]},
                            )
                        content_type = response.headers.get("Content-Type")
                        content_length = response.headers.get("Content-Length")
                        async with aiofiles.open(output_path, "wb") as f:
                            async for chunk in response.content.iter_chunked(self.chunk_size):
                                await f.write(chunk)
            except DownloadException:
                raise
            except asyncio.TimeoutError as e:
                raise DownloadException(
                    f"Timed out after {self.timeout_seconds:g}s downloading {url}",
                    error_code="DOWNLOAD_TIMEOUT",
                    details={"url": url},
                ) from e
            except (aiohttp.ClientError, ValueError) as e:
                raise DownloadException(
                    f"Failed to download {url}: {e}",
                    error_code="DOWNLOAD_FAILED",
                    details={"url": url, "original_exception": type(e).__name__},
                ) from e

        size_bytes = os.path.getsize(output_path)
        result = DownloadResult(
            path=output_path,
            size_bytes=size_bytes,
            size_mb=size_bytes / BYTES_PER_MB,
            content_type=content_type or None,
            download_time_ms=timer.elapsed_ms,
        )
        logger.info(
            f"File downloaded successfully: {output_path} in {result.download_time_ms}ms, "
            f"{result.size_mb:.2f}MB, content-type={result.content_type}, content-length={content_length}"
        )
        return result
