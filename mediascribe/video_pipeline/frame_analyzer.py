import asyncio
import json
from typing import List, Optional

import aiofiles
from loguru import logger

from mediascribe.models import FrameAnalysis, SampledFrame, TokenUsage
from mediascribe.prompts import FRAME_ANALYSIS_PROMPT
from mediascribe.providers.base import VisionProvider

FRAME_ANALYSIS_MAX_TOKENS = 2000


class FrameAnalyzer:
    """Sends each sampled frame to the vision model independently.

    A frame whose analysis fails is logged and left out; it never affects the
    other frames.
    """

    def __init__(self, vision_provider: VisionProvider, max_tokens: int = FRAME_ANALYSIS_MAX_TOKENS):
        self.vision_provider = vision_provider
        self.max_tokens = max_tokens

    async def analyze_frame(self, frame: SampledFrame, prompt: Optional[str] = None) -> FrameAnalysis:
        async with aiofiles.open(frame.path, "rb") as f:
            image_data = await f.read()

        response = await self.vision_provider.analyze_image(
            image_data,
            prompt=prompt or FRAME_ANALYSIS_PROMPT,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )
        analysis = json.loads(response.get("analysis") or "")
        if not isinstance(analysis, dict):
            raise ValueError(f"Expected a JSON object for frame {frame.index}, got {type(analysis).__name__}")

        return FrameAnalysis(
            frame_index=frame.index,
            timestamp_seconds=frame.timestamp_seconds,
            analysis=analysis,
            token_usage=TokenUsage.from_usage(response.get("usage")),
        )

    async def _analyze_or_skip(self, frame: SampledFrame, prompt: Optional[str]) -> Optional[FrameAnalysis]:
        try:
            return await self.analyze_frame(frame, prompt)
        except Exception as e:
            logger.error(f"Error analyzing frame {frame.index} at {frame.timestamp_seconds:.1f}s: {e}")
            return None

    async def analyze_frames(self, frames: List[SampledFrame], custom_prompt: Optional[str] = None) -> List[FrameAnalysis]:
        """Analyze all frames concurrently. Results keep the frame order."""
        logger.info(f"Analyzing {len(frames)} frames")
        results = await asyncio.gather(*(self._analyze_or_skip(frame, custom_prompt) for frame in frames))
        analyses = [result for result in results if result is not None]
        skipped = len(frames) - len(analyses)
        if skipped:
            logger.warning(f"Skipped {skipped} frame(s) whose analysis failed")
        logger.info(f"Analyzed {len(analyses)} of {len(frames)} frames")
        return analyses
