import shutil

import pytest

from conftest import requires_ffmpeg
from mediascribe.exceptions import FFmpegNotFoundException, FileTooLargeException
from mediascribe.media.audio import AudioExtractor, estimate_audio_duration, validate_file_size


def test_validate_file_size_within_limit(temp_dir):
    path = temp_dir / "a.mp3"
    path.write_bytes(b"x" * 1024)

    info = validate_file_size(str(path), limit_mb=1)

    assert info.size_bytes == 1024


def test_validate_file_size_over_limit(temp_dir):
    path = temp_dir / "big.mp3"
    path.write_bytes(b"x" * (2 * 1024 * 1024))

    with pytest.raises(FileTooLargeException) as exc_info:
        validate_file_size(str(path), limit_mb=1)

    assert exc_info.value.message == "Audio file is too large: 2.00MB. Maximum size is 1MB."


def test_estimate_audio_duration():
    assert estimate_audio_duration(5.0) == 0.5
    assert estimate_audio_duration(0) is None


def test_build_command_targets_mono_mp3():
    command = AudioExtractor("/usr/bin/ffmpeg").build_command("in.mp4", "out.mp3")

    assert command[0] == "/usr/bin/ffmpeg"
    assert "-vn" in command
    assert command[command.index("-ac") + 1] == "1"
    assert command[command.index("-acodec") + 1] == "libmp3lame"
    assert command[command.index("-b:a") + 1] == "64k"
    assert "-y" in command


async def test_extract_without_ffmpeg_raises(temp_dir):
    with pytest.raises(FFmpegNotFoundException):
        await AudioExtractor(None).extract(str(temp_dir / "in.mp4"), str(temp_dir / "out.mp3"))


@requires_ffmpeg
async def test_extract_real_video(temp_dir, sample_video):
    output = temp_dir / "out.mp3"
    result = await AudioExtractor(shutil.which("ffmpeg")).extract(sample_video, str(output))

    assert output.stat().st_size > 0
    assert result.duration_ms >= 1
    assert result.output_size_bytes == output.stat().st_size
