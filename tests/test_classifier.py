import pytest

from mediascribe.media.classifier import (
    AMBIGUOUS_EXTENSIONS,
    AUDIO_ONLY_EXTENSIONS,
    classify,
    is_audio_file,
    normalize_content_type,
)
from mediascribe.models import FileKind


@pytest.mark.parametrize("ext", sorted(AUDIO_ONLY_EXTENSIONS))
def test_audio_extension_without_content_type_is_audio(ext):
    assert classify(f"/tmp/input-1{ext}") is FileKind.AUDIO_ONLY
    assert classify(f"/tmp/INPUT-1{ext.upper()}") is FileKind.AUDIO_ONLY


@pytest.mark.parametrize("ext", sorted(AMBIGUOUS_EXTENSIONS))
def test_ambiguous_extension_without_content_type_needs_extraction(ext):
    assert classify(f"/tmp/input-1{ext}") is FileKind.NEEDS_EXTRACTION


@pytest.mark.parametrize("content_type", [
    "video/mp4",
    "video/quicktime",
    "VIDEO/WEBM; codecs=vp9",
    "application/x-matroska",
])
@pytest.mark.parametrize("path", ["/tmp/a.mp3", "/tmp/a.wav", "/tmp/a.bin"])
def test_video_content_type_overrides_extension(content_type, path):
    assert classify(path, content_type) is FileKind.NEEDS_EXTRACTION


@pytest.mark.parametrize("content_type", ["audio/mpeg", "audio/mp4", "application/ogg"])
def test_audio_content_type_overrides_ambiguous_extension(content_type):
    assert classify("/tmp/a.mp4", content_type) is FileKind.AUDIO_ONLY


def test_unknown_everything_defaults_to_extraction():
    assert classify("/tmp/input-1.bin") is FileKind.NEEDS_EXTRACTION
    assert classify("/tmp/input-1", "application/octet-stream") is FileKind.NEEDS_EXTRACTION


def test_normalize_content_type():
    assert normalize_content_type("Audio/MPEG; charset=binary") == "audio/mpeg"
    assert normalize_content_type("") is None
    assert normalize_content_type(None) is None


def test_is_audio_file():
    assert is_audio_file("clip.m4a")
    assert not is_audio_file("clip.mp4")
