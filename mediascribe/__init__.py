from .pipeline import TranscriptionPipeline, build_request
from .video_pipeline import VideoAnalyzer

__version__ = "1.0.0"

__all__ = ["TranscriptionPipeline", "build_request", "VideoAnalyzer"]
