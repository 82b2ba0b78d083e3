from typing import Dict, Optional


class MediaScribeException(Exception):
    """Base exception for the mediascribe pipeline."""

    def __init__(self, message: str, error_code: str = None, details: Dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ValidationException(MediaScribeException):
    """Raised when client input is missing or malformed."""
    pass


class ConfigurationException(MediaScribeException):
    """Raised when configuration is invalid or a credential is missing."""
    pass


class ProviderException(MediaScribeException):
    """Raised when an external model provider fails."""
    pass


class TranscriptionException(ProviderException):
    """Raised when speech-to-text fails. Always fatal to the request."""
    pass


class DownloadException(MediaScribeException):
    """Raised when the source media cannot be fetched."""
    pass


class ExtractionException(MediaScribeException):
    """Raised when ffmpeg runs but fails to produce the expected output."""
    pass


class FFmpegNotFoundException(ExtractionException):
    """Raised when ffmpeg (or ffprobe) is not installed or not on PATH."""
    pass


class FileTooLargeException(MediaScribeException):
    """Raised when a file exceeds the transcription upload ceiling."""

    def __init__(self, size_mb: float, limit_mb: float, path: Optional[str] = None):
        super().__init__(
            f"Audio file is too large: {size_mb:.2f}MB. Maximum size is {limit_mb:g}MB.",
            error_code="FILE_TOO_LARGE",
            details={"size_mb": round(size_mb, 2), "limit_mb": limit_mb, "path": path},
        )
        self.size_mb = size_mb
        self.limit_mb = limit_mb


class PipelineFailure(MediaScribeException):
    """Raised by the transcription pipeline after a fatal stage error.

    Temp resources have been released by the time it propagates out of the pipeline.
    """

    def __init__(self, message: str, url: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(
            message,
            error_code="PIPELINE_FAILED",
            details={"url": url, "error_type": type(cause).__name__ if cause else None},
        )
        self.url = url
        self.cause = cause
