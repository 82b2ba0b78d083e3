import asyncio
import os
import shutil

import pytest

from conftest import requires_ffmpeg
from mediascribe.exceptions import ExtractionException, FFmpegNotFoundException, ValidationException
from mediascribe.video_pipeline import frame_sampler
from mediascribe.video_pipeline.frame_sampler import FrameSampler, compute_sample_timestamps, frame_filename


@pytest.mark.parametrize("duration,interval,max_frames,expected", [
    (37, 5, 6, [0, 5, 10, 15, 20, 25]),
    (12, 5, 6, [0, 5, 10]),
    (10, 5, 6, [0, 5]),
    (3, 5, 6, [0]),
    (100, 10, 3, [0, 10, 20]),
    (None, 5, 6, [0]),
    (0, 5, 6, [0]),
    (-4, 5, 6, [0]),
    (float("nan"), 5, 6, [0]),
    (float("inf"), 5, 6, [0]),
])
def test_compute_sample_timestamps(duration, interval, max_frames, expected):
    assert compute_sample_timestamps(duration, interval, max_frames) == expected


@pytest.mark.parametrize("interval,max_frames", [(0, 6), (-1, 6), (5, 0), (5, -2)])
def test_non_positive_arguments_are_rejected(interval, max_frames):
    with pytest.raises(ValidationException):
        compute_sample_timestamps(30, interval, max_frames)


def test_frame_filename():
    assert frame_filename(2, 10) == "frame_2_10.0s.jpg"


def test_build_command_grabs_one_high_quality_frame():
    command = FrameSampler("/usr/bin/ffmpeg").build_command("in.mp4", 5.0, "out.jpg")

    assert command[command.index("-ss") + 1] == "5.0"
    assert command.index("-ss") < command.index("-i")
    assert command[command.index("-vframes") + 1] == "1"
    assert command[command.index("-q:v") + 1] == "2"


async def test_sample_without_ffmpeg_raises(temp_dir):
    with pytest.raises(FFmpegNotFoundException):
        await FrameSampler(None).sample("video.mp4", str(temp_dir))


@requires_ffmpeg
async def test_sample_real_video(sample_video, temp_dir):
    sampler = FrameSampler(shutil.which("ffmpeg"), shutil.which("ffprobe"))

    frames = await sampler.sample(sample_video, str(temp_dir / "frames"), interval_seconds=5, max_frames=6)

    assert [f.timestamp_seconds for f in frames] == [0, 5, 10]
    assert [os.path.basename(f.path) for f in frames] == ["frame_0_0.0s.jpg", "frame_1_5.0s.jpg", "frame_2_10.0s.jpg"]
    assert all(os.path.getsize(f.path) > 0 for f in frames)


@requires_ffmpeg
async def test_unreadable_video_falls_back_then_fails(temp_dir):
    bogus = temp_dir / "bogus.mp4"
    bogus.write_bytes(b"definitely not a video")
    sampler = FrameSampler(shutil.which("ffmpeg"), shutil.which("ffprobe"))

    # Probe failure means one frame at 0s, and that grab fails the call
    with pytest.raises(ExtractionException):
        await sampler.sample(str(bogus), str(temp_dir / "frames"))


def output_of(args):
    return next(arg for arg in args if arg.endswith(".jpg"))


def stub_probe(monkeypatch, duration):
    async def fake_duration(video_path, ffprobe_path):
        return duration

    monkeypatch.setattr(frame_sampler, "get_video_duration", fake_duration)


@pytest.fixture
def written(monkeypatch):
    """Replaces ffmpeg with a stub that writes a placeholder JPEG per grab."""
    paths = []

    async def fake_run(args, description):
        path = output_of(args)
        with open(path, "wb") as f:
            f.write(b"\xff\xd8jpeg")
        paths.append(path)

    monkeypatch.setattr(frame_sampler, "run_ffmpeg", fake_run)
    return paths


@pytest.mark.parametrize("duration", [0, None, -3.0])
async def test_unknown_duration_samples_a_single_frame(monkeypatch, written, temp_dir, duration):
    stub_probe(monkeypatch, duration)

    frames = await FrameSampler("/usr/bin/ffmpeg").sample("clip.mp4", str(temp_dir), interval_seconds=5, max_frames=6)

    assert len(frames) == 1
    assert frames[0].index == 0
    assert frames[0].timestamp_seconds == 0.0
    assert written == [frames[0].path]


async def test_frames_are_planned_from_probed_duration(monkeypatch, written, temp_dir):
    stub_probe(monkeypatch, 37.0)

    frames = await FrameSampler("/usr/bin/ffmpeg").sample("clip.mp4", str(temp_dir), interval_seconds=5, max_frames=6)

    assert [f.timestamp_seconds for f in frames] == [0, 5, 10, 15, 20, 25]
    assert sorted(written) == sorted(f.path for f in frames)


async def test_failed_grab_raises_after_the_others_settle(monkeypatch, temp_dir):
    stub_probe(monkeypatch, 15.0)
    finished = []

    async def fake_run(args, description):
        path = output_of(args)
        if os.path.basename(path).startswith("frame_0_"):
            raise ExtractionException("FFmpeg execution failed during frame grab at 0.0s")
        await asyncio.sleep(0.05)
        with open(path, "wb") as f:
            f.write(b"\xff\xd8jpeg")
        finished.append(path)

    monkeypatch.setattr(frame_sampler, "run_ffmpeg", fake_run)

    with pytest.raises(ExtractionException, match="frame grab at 0.0s"):
        await FrameSampler("/usr/bin/ffmpeg").sample("clip.mp4", str(temp_dir), interval_seconds=5, max_frames=3)

    assert sorted(os.path.basename(p) for p in finished) == ["frame_1_5.0s.jpg", "frame_2_10.0s.jpg"]


async def test_grab_without_output_file_fails(monkeypatch, temp_dir):
    stub_probe(monkeypatch, 10.0)

    async def silent_run(args, description):
        return None

    monkeypatch.setattr(frame_sampler, "run_ffmpeg", silent_run)

    with pytest.raises(ExtractionException) as exc_info:
        await FrameSampler("/usr/bin/ffmpeg").sample("clip.mp4", str(temp_dir), interval_seconds=5, max_frames=1)

    assert exc_info.value.error_code == "FFMPEG_NO_OUTPUT"
