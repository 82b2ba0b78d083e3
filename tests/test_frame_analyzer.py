from conftest import FakeVisionProvider
from mediascribe.models import SampledFrame
from mediascribe.prompts import FRAME_ANALYSIS_PROMPT
from mediascribe.video_pipeline.frame_analyzer import FrameAnalyzer


def write_frames(directory, count):
    frames = []
    for i in range(count):
        path = directory / f"frame_{i}_{i * 5:.1f}s.jpg"
        path.write_bytes(str(i).encode())
        frames.append(SampledFrame(index=i, timestamp_seconds=i * 5, path=str(path)))
    return frames


async def test_all_frames_analyzed_in_order(temp_dir):
    vision = FakeVisionProvider(analyses=[{"people": {"count": n}} for n in range(4)])

    analyses = await FrameAnalyzer(vision).analyze_frames(write_frames(temp_dir, 4))

    assert [a.frame_index for a in analyses] == [0, 1, 2, 3]
    assert [a.analysis["people"]["count"] for a in analyses] == [0, 1, 2, 3]
    assert [a.timestamp_seconds for a in analyses] == [0, 5, 10, 15]
    assert all(a.token_usage.total_tokens == 60 for a in analyses)
    assert vision.prompts == [FRAME_ANALYSIS_PROMPT] * 4


async def test_failed_frame_is_skipped(temp_dir):
    vision = FakeVisionProvider(fail_on={1})

    analyses = await FrameAnalyzer(vision).analyze_frames(write_frames(temp_dir, 3))

    assert [a.frame_index for a in analyses] == [0, 2]


async def test_non_json_response_is_skipped(temp_dir):
    vision = FakeVisionProvider(analyses=["{\"ok\": true}", "I can't parse images", "[1, 2]"])

    analyses = await FrameAnalyzer(vision).analyze_frames(write_frames(temp_dir, 3))

    assert [a.frame_index for a in analyses] == [0]


async def test_missing_frame_file_is_skipped(temp_dir):
    frames = write_frames(temp_dir, 2)
    frames.append(SampledFrame(index=2, timestamp_seconds=10, path=str(temp_dir / "gone.jpg")))

    analyses = await FrameAnalyzer(FakeVisionProvider()).analyze_frames(frames)

    assert len(analyses) == 2


async def test_custom_prompt_replaces_default(temp_dir):
    vision = FakeVisionProvider()
    await FrameAnalyzer(vision).analyze_frames(write_frames(temp_dir, 2), custom_prompt="Count the dogs")
    assert vision.prompts == ["Count the dogs", "Count the dogs"]


async def test_no_frames():
    assert await FrameAnalyzer(FakeVisionProvider()).analyze_frames([]) == []
