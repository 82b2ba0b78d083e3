from typing import Optional

from loguru import logger

from mediascribe.config.settings import MediaScribeConfig
from mediascribe.media.ffmpeg_tools import locate_ffmpeg, locate_ffprobe
from mediascribe.media.temp_resources import TempResources
from mediascribe.models import (
    AggregatedAnalysis,
    TokenUsage,
    VideoAnalysisMetadata,
    VideoAnalysisResult,
    VideoTokenUsage,
)
from mediascribe.providers.factory import ProviderBundle
from mediascribe.utils.error_handler import log_exceptions
from mediascribe.utils.execution_timer import ExecutionTimer
from mediascribe.video_pipeline.aggregator import aggregate_frame_analyses, summarize_frames
from mediascribe.video_pipeline.frame_analyzer import FrameAnalyzer
from mediascribe.video_pipeline.frame_sampler import FrameSampler


class VideoAnalyzer:
    """
    Visual analysis of a local video file.

    Samples frames at a fixed interval, runs each through the vision model,
    aggregates the per-frame results and asks the chat model for a narrative
    summary. The frames live in a temp directory that is removed on every
    exit path.

    Example:
        >>> analyzer = VideoAnalyzer(providers)
        >>> result = await analyzer.analyze("talk.mp4", interval_seconds=10)
        >>> result.aggregated_analysis.people_count.max
    """

    def __init__(self, providers: ProviderBundle, config: Optional[MediaScribeConfig] = None):
        self.providers = providers
        self.config = config or MediaScribeConfig()
        ffmpeg_path = locate_ffmpeg(self.config.media.ffmpeg_path)
        self.sampler = FrameSampler(ffmpeg_path, locate_ffprobe(ffmpeg_path, self.config.media.ffprobe_path))
        self.frame_analyzer = FrameAnalyzer(providers.vision)

    @log_exceptions(custom_message="Video analysis failed")
    async def analyze(
        self,
        video_path: str,
        interval_seconds: float = 5,
        max_frames: int = 6,
        custom_prompt: Optional[str] = None,
    ) -> VideoAnalysisResult:
        """
        Analyze ``video_path``.

        Raises:
            ValidationException: Non-positive interval or frame cap
            FFmpegNotFoundException: ffmpeg is not available
            ExtractionException: A frame could not be extracted
        """
        logger.info(
            f"Starting video content analysis of {video_path} "
            f"(interval={interval_seconds}s, max_frames={max_frames}, custom_prompt={bool(custom_prompt)})"
        )
        timer = ExecutionTimer()
        with timer:
            async with TempResources(self.config.media.temp_dir) as resources:
                frame_dir = resources.directory(prefix="video-frames-")
                frames = await self.sampler.sample(video_path, frame_dir, interval_seconds, max_frames)
                analyses = await self.frame_analyzer.analyze_frames(frames, custom_prompt)

                summary, summary_usage = None, TokenUsage()
                if analyses:
                    summary, summary_usage = await summarize_frames(self.providers.llm, analyses)
                else:
                    logger.warning("No frames could be analyzed, skipping the video summary")

        aggregated = aggregate_frame_analyses(analyses) if analyses else AggregatedAnalysis()
        frames_usage = TokenUsage.sum([fa.token_usage for fa in analyses])
        token_usage = VideoTokenUsage(
            frames=frames_usage,
            summary=summary_usage,
            total=frames_usage + summary_usage,
        )

        logger.info(
            f"Video content analysis completed: {len(analyses)} frames analyzed in {timer.elapsed_ms}ms, "
            f"tokens={token_usage.total.total_tokens}"
        )
        return VideoAnalysisResult(
            summary=summary,
            frame_analyses=analyses,
            aggregated_analysis=aggregated,
            metadata=VideoAnalysisMetadata(
                frames_analyzed=len(analyses),
                interval_seconds=interval_seconds,
                processing_time_ms=timer.elapsed_ms,
                token_usage=token_usage,
            ),
        )
