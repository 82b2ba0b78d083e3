from .video_analysis import VideoAnalyzer
from .frame_sampler import FrameSampler, compute_sample_timestamps
from .frame_analyzer import FrameAnalyzer
from .aggregator import aggregate_frame_analyses, summarize_frames

__all__ = ["VideoAnalyzer", "FrameSampler", "compute_sample_timestamps", "FrameAnalyzer",
           "aggregate_frame_analyses", "summarize_frames"]
