"""
Roll per-frame analyses up into one video-level view.

``aggregate_frame_analyses`` is pure and total: it accepts model output of any
shape and returns zero-valued stats for an empty input. ``summarize_frames``
is the single narrative model call made over all frames.
"""

import json
import numbers
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger

from mediascribe.models import (
    AggregatedAnalysis,
    FrameAnalysis,
    LocationStats,
    PeopleCountStats,
    TokenUsage,
)
from mediascribe.prompts import VIDEO_SUMMARY_TEMPLATE
from mediascribe.providers.base import LLMProvider

VIDEO_SUMMARY_MAX_TOKENS = 1500


def _people_count(analysis: Dict[str, Any]) -> Optional[Union[int, float]]:
    people = analysis.get("people")
    if not isinstance(people, dict):
        return None
    count = people.get("count")
    # bool is a Number subclass but never a head count
    if isinstance(count, bool) or not isinstance(count, numbers.Real):
        return None
    return count


def _location_value(location: Any) -> Optional[str]:
    if isinstance(location, dict):
        value = location.get("type") or location.get("description")
        return str(value) if value else None
    if isinstance(location, str) and location:
        return location
    return None


def _add_unique(target: List[Any], items: Any):
    if not isinstance(items, list):
        return
    for item in items:
        # Model output may contain dicts, so membership is checked by equality
        if item not in target:
            target.append(item)


def aggregate_frame_analyses(frame_analyses: List[FrameAnalysis]) -> AggregatedAnalysis:
    """
    Aggregate frame analyses into a single result.

    People counts are reduced over the frames that reported one; frames with a
    missing count are left out of the average. The most common location wins
    ties by first appearance.
    """
    if not frame_analyses:
        return AggregatedAnalysis()

    counts: List[Union[int, float]] = []
    activities: List[Any] = []
    objects: List[Any] = []
    people_details: List[Any] = []
    locations: List[str] = []

    for frame_analysis in frame_analyses:
        analysis = frame_analysis.analysis or {}

        count = _people_count(analysis)
        if count is not None:
            counts.append(count)

        _add_unique(activities, analysis.get("activities"))
        _add_unique(objects, analysis.get("objects"))

        people = analysis.get("people")
        if isinstance(people, dict) and isinstance(people.get("details"), list):
            people_details.extend(people["details"])

        location = _location_value(analysis.get("location"))
        if location is not None:
            locations.append(location)

    people_count = PeopleCountStats()
    if counts:
        people_count = PeopleCountStats(
            min=min(counts),
            max=max(counts),
            average=sum(counts) / len(counts),
        )

    frequency = Counter(locations)
    most_common = frequency.most_common(1)[0][0] if frequency else None

    return AggregatedAnalysis(
        people_count=people_count,
        activities=activities,
        locations=LocationStats(all=list(frequency.keys()), most_common=most_common),
        common_objects=objects,
        people_details=people_details,
    )


def build_summary_prompt(frame_analyses: List[FrameAnalysis]) -> str:
    frames = "\n\n".join(
        f"Frame {position} (at {fa.timestamp_seconds:g}s): {json.dumps(fa.analysis)}"
        for position, fa in enumerate(frame_analyses, start=1)
    )
    return VIDEO_SUMMARY_TEMPLATE.format(frames=frames)


async def summarize_frames(
    llm_provider: LLMProvider,
    frame_analyses: List[FrameAnalysis],
) -> Tuple[Optional[Dict[str, Any]], TokenUsage]:
    """
    Ask the chat model for a narrative summary of the whole video.

    Returns ``(None, TokenUsage())`` on any failure; the video result is still
    usable without a summary.
    """
    try:
        response = await llm_provider.chat_completion(
            [{"role": "user", "content": build_summary_prompt(frame_analyses)}],
            response_format={"type": "json_object"},
            max_tokens=VIDEO_SUMMARY_MAX_TOKENS,
        )
        usage = TokenUsage.from_usage(response.get("usage"))
        summary = json.loads(response.get("content") or "")
        if not isinstance(summary, dict):
            raise ValueError(f"Expected a JSON object, got {type(summary).__name__}")
    except Exception as e:
        logger.error(f"Error generating video summary: {e}")
        return None, TokenUsage()
    return summary, usage
