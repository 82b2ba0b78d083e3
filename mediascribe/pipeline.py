"""
Transcription request orchestration.

Stages run strictly in order::

    validate -> download -> classify -> [extract] -> size check -> transcribe
             -> (sentiment || summary) -> cleanup

Input and configuration problems are rejected before any temp path exists.
Every later failure is fatal: it is logged with full context, temp paths are
released and a ``PipelineFailure`` is raised. Sentiment and summary failures
are absorbed by the analysis client and never reach this boundary.
"""

import asyncio
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from mediascribe.analysis.text_analysis import TranscriptionAnalysisClient
from mediascribe.config.settings import MediaScribeConfig
from mediascribe.exceptions import (
    ConfigurationException,
    MediaScribeException,
    PipelineFailure,
    ValidationException,
)
from mediascribe.media.audio import AudioExtractor, estimate_audio_duration, validate_file_size
from mediascribe.media.classifier import classify
from mediascribe.media.fetcher import MediaFetcher, url_suffix
from mediascribe.media.ffmpeg_tools import locate_ffmpeg
from mediascribe.media.temp_resources import TempResources
from mediascribe.models import (
    FileKind,
    MediaRequest,
    ProcessingTimes,
    TranscriptionMetadata,
    TranscriptionResponse,
    TranscriptionTokenUsage,
    WhisperUsage,
)
from mediascribe.providers.factory import ProviderBundle, ProviderFactory
from mediascribe.utils.execution_timer import ExecutionTimer

INVALID_URL_MESSAGE = "URL is required and must be a string"
MISSING_CREDENTIAL_MESSAGE = "Server configuration error: OpenAI API key not set"


def build_request(url: Any, summarization_prompt: Any = None) -> MediaRequest:
    """
    Validate raw request fields.

    Raises:
        ValidationException: ``url`` is missing, empty or not a string
    """
    if not url or not isinstance(url, str):
        logger.warning(f"Invalid request: URL missing or invalid ({url!r})")
        raise ValidationException(INVALID_URL_MESSAGE, error_code="INVALID_URL")
    if summarization_prompt is not None and not isinstance(summarization_prompt, str):
        raise ValidationException("summarizationPrompt must be a string", error_code="INVALID_PROMPT")
    try:
        return MediaRequest(url=url, summarization_prompt=summarization_prompt or None)
    except ValidationError as e:
        raise ValidationException(INVALID_URL_MESSAGE, error_code="INVALID_URL", details={"errors": e.errors()}) from e


class TranscriptionPipeline:
    """
    Runs one transcription request end to end.

    The provider bundle is created on first use and then shared by every
    request handled by this pipeline instance.

    Example:
        >>> pipeline = TranscriptionPipeline()
        >>> response = await pipeline.run(MediaRequest(url="https://example.com/talk.mp4"))
        >>> response.to_payload()["metadata"]["fileWasAudio"]
    """

    def __init__(
        self,
        config: Optional[MediaScribeConfig] = None,
        providers: Optional[ProviderBundle] = None,
        fetcher: Optional[MediaFetcher] = None,
    ):
        self.config = config or MediaScribeConfig()
        self._providers = providers
        media = self.config.media
        self.ffmpeg_path = locate_ffmpeg(media.ffmpeg_path)
        if self.ffmpeg_path:
            logger.info(f"FFmpeg configured at: {self.ffmpeg_path}")
        else:
            logger.warning("FFmpeg not found; video sources will fail until it is installed")
        self.extractor = AudioExtractor(self.ffmpeg_path, bitrate=media.audio_bitrate, sample_rate=media.audio_sample_rate)
        self.fetcher = fetcher or MediaFetcher(timeout_seconds=media.download_timeout_seconds)

    @property
    def providers(self) -> ProviderBundle:
        """
        Shared provider clients, created on first access.

        Raises:
            ConfigurationException: The provider credential is not set
        """
        if self._providers is None:
            if not self.config.provider.has_credentials:
                logger.error("OpenAI API key not configured")
                raise ConfigurationException(MISSING_CREDENTIAL_MESSAGE, error_code="MISSING_API_KEY")
            self._providers = ProviderFactory.create_bundle(self.config.provider)
        return self._providers

    async def close(self):
        if self._providers is not None:
            await self._providers.close()

    async def run(self, request: MediaRequest) -> TranscriptionResponse:
        """
        Transcribe and analyze the media at ``request.url``.

        Raises:
            ValidationException: The URL is missing or not a string
            ConfigurationException: The provider credential is not set
            PipelineFailure: Any fatal error after validation; temp paths
                have been released when it is raised
        """
        total_timer = ExecutionTimer().start()
        request = build_request(request.url, request.summarization_prompt)
        providers = self.providers
        client = TranscriptionAnalysisClient(providers.transcription, providers.llm)

        logger.info(f"Starting transcription process for {request.url} (ffmpeg: {self.ffmpeg_path})")
        resources = TempResources(self.config.media.temp_dir)
        context: Dict[str, Any] = {"url": request.url, "ffmpeg_path": self.ffmpeg_path}
        try:
            file_set = resources.file_set(input_suffix=url_suffix(request.url))
            context.update(temp_input_path=file_set.input_path, temp_output_path=file_set.output_path)
            logger.info(f"Created temporary file paths: {file_set.input_path}, {file_set.output_path}")

            download = await self.fetcher.download(request.url, file_set.input_path)

            kind = classify(file_set.input_path, download.content_type)
            file_was_audio = kind is FileKind.AUDIO_ONLY
            extraction_ms = 0
            if file_was_audio:
                logger.info(
                    f"File is already an audio file, skipping extraction "
                    f"(content-type={download.content_type}, {download.size_mb:.2f}MB)"
                )
                audio_path = file_set.input_path
            else:
                logger.info(f"File appears to be a video, extracting audio (content-type={download.content_type})")
                extraction = await self.extractor.extract(file_set.input_path, file_set.output_path)
                extraction_ms = extraction.duration_ms
                audio_path = file_set.output_path

            size = validate_file_size(audio_path, self.config.media.max_upload_size_mb)

            transcription = await client.transcribe(audio_path)
            sentiment, summary = await asyncio.gather(
                client.analyze_sentiment(transcription.text),
                client.summarize(transcription.text, request.summarization_prompt),
            )
        except Exception as e:
            total_timer.stop()
            self._log_failure(e, context, total_timer.elapsed_ms)
            message = e.message if isinstance(e, MediaScribeException) else (str(e) or "Unknown error occurred")
            raise PipelineFailure(message, url=request.url, cause=e) from e
        finally:
            # Also reached on cancellation
            with ExecutionTimer() as cleanup_timer:
                records = resources.release()
            logger.info(
                f"Temporary files cleaned up in {cleanup_timer.elapsed_ms}ms: {[(r.path, r.cleaned) for r in records]}"
            )
        total_timer.stop()

        token_usage = TranscriptionTokenUsage(
            whisper=WhisperUsage(
                estimated_duration_minutes=estimate_audio_duration(size.size_mb),
                audio_size_mb=round(size.size_mb, 2),
            ),
            sentiment=sentiment.token_usage,
            summarization=summary.token_usage,
            total=sentiment.token_usage + summary.token_usage,
        )
        processing_times = ProcessingTimes(
            download=download.download_time_ms,
            extraction=extraction_ms,
            transcription=transcription.processing_time_ms,
            sentiment=sentiment.processing_time_ms,
            summarization=summary.processing_time_ms,
            cleanup=cleanup_timer.elapsed_ms,
            total=total_timer.elapsed_ms,
        )
        logger.info(
            f"Request completed successfully for {request.url}: total={processing_times.total}ms, "
            f"download={processing_times.download}ms, extraction={processing_times.extraction}ms, "
            f"transcription={processing_times.transcription}ms, words={transcription.word_count}, "
            f"file_was_audio={file_was_audio}, tokens={token_usage.total.total_tokens}"
        )
        return TranscriptionResponse(
            url=request.url,
            transcription=transcription.text,
            sentiment=sentiment,
            summary=summary.summary,
            metadata=TranscriptionMetadata(
                transcription_length=transcription.length,
                word_count=transcription.word_count,
                processing_times=processing_times,
                token_usage=token_usage,
                file_was_audio=file_was_audio,
            ),
        )

    @staticmethod
    def _log_failure(error: Exception, context: Dict[str, Any], elapsed_ms: int):
        details = ", ".join(f"{key}={value}" for key, value in context.items())
        logger.opt(exception=error).error(
            f"Error in transcription pipeline ({type(error).__name__}) after {elapsed_ms}ms: {error} [{details}]"
        )
