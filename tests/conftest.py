import json
import os
import shutil
import subprocess
from typing import Any, Dict, List, Optional

import pytest

from mediascribe.config.settings import LoggingConfig, MediaConfig, MediaScribeConfig, ProviderConfig
from mediascribe.exceptions import DownloadException, ProviderException, TranscriptionException
from mediascribe.models import DownloadResult, ExtractionResult
from mediascribe.providers.base import LLMProvider, TranscriptionProvider, VisionProvider
from mediascribe.providers.factory import ProviderBundle

FFMPEG_AVAILABLE = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None
requires_ffmpeg = pytest.mark.skipif(not FFMPEG_AVAILABLE, reason="ffmpeg/ffprobe not installed")

SENTIMENT_JSON = json.dumps({
    "sentiment": "positive",
    "confidence": 0.87,
    "emotions": ["joy", "optimism"],
    "summary": "The speaker is upbeat about the product.",
})


def usage(prompt: int, completion: int) -> Dict[str, int]:
    return {"prompt_tokens": prompt, "completion_tokens": completion, "total_tokens": prompt + completion}


class FakeLLMProvider(LLMProvider):
    """JSON-mode calls get ``json_content``; free-text calls get ``text_content``."""

    def __init__(
        self,
        json_content: Optional[str] = SENTIMENT_JSON,
        text_content: Optional[str] = "A concise summary of the response.",
        json_usage: Optional[Dict[str, int]] = None,
        text_usage: Optional[Dict[str, int]] = None,
        fail_json: bool = False,
        fail_text: bool = False,
    ):
        self.json_content = json_content
        self.text_content = text_content
        self.json_usage = json_usage if json_usage is not None else usage(100, 40)
        self.text_usage = text_usage if text_usage is not None else usage(300, 120)
        self.fail_json = fail_json
        self.fail_text = fail_text
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def chat_completion(self, messages: List[Dict], **kwargs) -> Dict[str, Any]:
        self.calls.append({"messages": messages, **kwargs})
        if kwargs.get("response_format"):
            if self.fail_json:
                raise ProviderException("chat model unavailable")
            return {"content": self.json_content, "usage": self.json_usage, "model": "fake", "finish_reason": "stop"}
        if self.fail_text:
            raise ProviderException("chat model unavailable")
        return {"content": self.text_content, "usage": self.text_usage, "model": "fake", "finish_reason": "stop"}

    async def close(self):
        self.closed = True


class FakeVisionProvider(VisionProvider):
    """Canned analysis per frame index; indexes in ``fail_on`` raise.

    Frame files written by the tests contain their own index as text. Real
    JPEGs are numbered in call order.
    """

    def __init__(self, analyses: Optional[List[Any]] = None, fail_on: Optional[set] = None):
        self.analyses = list(analyses or [])
        self.fail_on = fail_on or set()
        self.prompts: List[str] = []

    async def analyze_image(self, image_data: bytes, **kwargs) -> Dict[str, Any]:
        self.prompts.append(kwargs.get("prompt"))
        try:
            index = int(image_data.decode())
        except (UnicodeDecodeError, ValueError):
            index = len(self.prompts) - 1
        if index in self.fail_on:
            raise ProviderException(f"vision failed for frame {index}")
        analysis = self.analyses[index] if index < len(self.analyses) else {"people": {"count": 1}}
        content = analysis if isinstance(analysis, str) else json.dumps(analysis)
        return {"analysis": content, "model": "fake-vision", "usage": usage(50, 10)}


class FakeTranscriptionProvider(TranscriptionProvider):
    def __init__(self, text: str = "hello world this is a test", fail: bool = False):
        self.text = text
        self.fail = fail
        self.paths: List[str] = []

    async def transcribe_file(self, audio_path: str, language: str = None, **kwargs) -> str:
        self.paths.append(audio_path)
        if self.fail:
            raise TranscriptionException("Whisper rejected the file")
        return self.text


class FakeFetcher:
    """Writes ``payload`` to the destination instead of going to the network."""

    def __init__(self, payload: bytes = b"ID3fake-mp3-bytes", content_type: Optional[str] = "audio/mpeg", fail: bool = False):
        self.payload = payload
        self.content_type = content_type
        self.fail = fail
        self.downloads: List[str] = []

    async def download(self, url: str, output_path: str) -> DownloadResult:
        self.downloads.append(output_path)
        if self.fail:
            raise DownloadException("Request failed with status code 404")
        with open(output_path, "wb") as f:
            f.write(self.payload)
        size = len(self.payload)
        return DownloadResult(
            path=output_path,
            size_bytes=size,
            size_mb=size / (1024 * 1024),
            content_type=self.content_type,
            download_time_ms=3,
        )


class FakeExtractor:
    def __init__(self, payload: bytes = b"extracted-mp3"):
        self.payload = payload
        self.calls: List[tuple] = []

    async def extract(self, input_path: str, output_path: str) -> ExtractionResult:
        self.calls.append((input_path, output_path))
        with open(output_path, "wb") as f:
            f.write(self.payload)
        return ExtractionResult(
            duration_ms=7,
            output_size_bytes=len(self.payload),
            output_size_mb=len(self.payload) / (1024 * 1024),
            input_size_mb=os.path.getsize(input_path) / (1024 * 1024),
            size_reduction_percent=0.0,
        )


@pytest.fixture
def temp_dir(tmp_path):
    path = tmp_path / "scratch"
    path.mkdir()
    return path


def make_config(temp_dir, api_key: Optional[str] = "test-key") -> MediaScribeConfig:
    return MediaScribeConfig.build(
        provider=ProviderConfig(api_key=api_key),
        media=MediaConfig(temp_dir=str(temp_dir)),
        logging=LoggingConfig(level="DEBUG"),
    )


@pytest.fixture
def config(temp_dir):
    return make_config(temp_dir)


@pytest.fixture
def llm():
    return FakeLLMProvider()


@pytest.fixture
def vision():
    return FakeVisionProvider()


@pytest.fixture
def transcriber():
    return FakeTranscriptionProvider()


@pytest.fixture
def providers(llm, vision, transcriber):
    return ProviderBundle(llm=llm, vision=vision, transcription=transcriber)


@pytest.fixture
def sample_video(tmp_path):
    """A 12 second test-pattern video with a sine-wave audio track."""
    if not FFMPEG_AVAILABLE:
        pytest.skip("ffmpeg/ffprobe not installed")
    path = tmp_path / "sample.mp4"
    subprocess.run(
        [
            shutil.which("ffmpeg"), "-hide_banner", "-loglevel", "error",
            "-f", "lavfi", "-i", "testsrc=duration=12:size=160x120:rate=5",
            "-f", "lavfi", "-i", "sine=frequency=440:duration=12",
            "-shortest", "-c:v", "mpeg4", "-c:a", "aac", "-y", str(path),
        ],
        check=True,
        capture_output=True,
    )
    return str(path)
