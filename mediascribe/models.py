from typing import Any, Dict, List, Literal, Optional, Union
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for every model that is serialized into an API payload.

    Fields are snake_case in Python and camelCase on the wire.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TokenUsage(CamelModel):
    """Provider-reported token counters for one or more model calls."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    prompt_tokens: int = Field(default=0, ge=0)
    completion_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    @classmethod
    def from_usage(cls, usage: Optional[Dict[str, Any]]) -> "TokenUsage":
        """Build from an OpenAI ``usage`` dict; missing counters count as zero."""
        if not usage:
            return cls()
        return cls(
            prompt_tokens=usage.get("prompt_tokens") or 0,
            completion_tokens=usage.get("completion_tokens") or 0,
            total_tokens=usage.get("total_tokens") or 0,
        )

    @classmethod
    def sum(cls, usages: List["TokenUsage"]) -> "TokenUsage":
        total = cls()
        for usage in usages:
            total = total + usage
        return total


class FileKind(str, Enum):
    AUDIO_ONLY = "audio_only"
    NEEDS_EXTRACTION = "needs_extraction"


class MediaRequest(BaseModel):
    """Inbound transcription request. Immutable for the request lifetime."""
    model_config = ConfigDict(frozen=True)

    url: str
    summarization_prompt: Optional[str] = None


class DownloadResult(BaseModel):
    path: str
    size_bytes: int
    size_mb: float
    content_type: Optional[str] = None
    download_time_ms: int = 0


class ExtractionResult(BaseModel):
    duration_ms: int
    output_size_bytes: int
    output_size_mb: float
    input_size_mb: float
    size_reduction_percent: float


class FileSizeInfo(BaseModel):
    size_bytes: int
    size_mb: float


class TranscriptionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    length: int
    word_count: int
    processing_time_ms: int


SentimentLabel = Literal["positive", "negative", "neutral", "mixed"]


class SentimentResult(CamelModel):
    sentiment: SentimentLabel
    confidence: float = Field(ge=0.0, le=1.0)
    emotions: List[str] = Field(default_factory=list)
    summary: str
    error: bool = False
    processing_time_ms: int = 0
    token_usage: TokenUsage = Field(default_factory=TokenUsage)


class SummaryResult(BaseModel):
    summary: str
    error: bool = False
    processing_time_ms: int = 0
    token_usage: TokenUsage = Field(default_factory=TokenUsage)


class ProcessingTimes(CamelModel):
    download: int = 0
    extraction: int = 0
    transcription: int = 0
    sentiment: int = 0
    summarization: int = 0
    cleanup: int = 0
    total: int = 0


class WhisperUsage(CamelModel):
    note: str = "Whisper API pricing is per minute of audio processed, not per token"
    estimated_duration_minutes: Optional[float] = None
    audio_size_mb: float = Field(default=0.0, alias="audioSizeMB")


class TranscriptionTokenUsage(CamelModel):
    whisper: WhisperUsage
    sentiment: TokenUsage
    summarization: TokenUsage
    total: TokenUsage


class TranscriptionMetadata(CamelModel):
    transcription_length: int
    word_count: int
    processing_times: ProcessingTimes
    token_usage: TranscriptionTokenUsage
    file_was_audio: bool


class TranscriptionResponse(CamelModel):
    url: str
    transcription: str
    sentiment: SentimentResult
    summary: str
    metadata: TranscriptionMetadata


class SampledFrame(BaseModel):
    index: int = Field(ge=0)
    timestamp_seconds: float = Field(ge=0)
    path: str


class FrameAnalysis(CamelModel):
    frame_index: int = Field(ge=0)
    timestamp_seconds: float = Field(ge=0)
    analysis: Dict[str, Any]
    token_usage: TokenUsage = Field(default_factory=TokenUsage)


class PeopleCountStats(CamelModel):
    min: Union[int, float] = 0
    max: Union[int, float] = 0
    average: float = 0


class LocationStats(CamelModel):
    all: List[str] = Field(default_factory=list)
    most_common: Optional[str] = None


class AggregatedAnalysis(CamelModel):
    people_count: PeopleCountStats = Field(default_factory=PeopleCountStats)
    activities: List[Any] = Field(default_factory=list)
    locations: LocationStats = Field(default_factory=LocationStats)
    common_objects: List[Any] = Field(default_factory=list)
    people_details: List[Any] = Field(default_factory=list)


class VideoTokenUsage(CamelModel):
    frames: TokenUsage = Field(default_factory=TokenUsage)
    summary: TokenUsage = Field(default_factory=TokenUsage)
    total: TokenUsage = Field(default_factory=TokenUsage)


class VideoAnalysisMetadata(CamelModel):
    frames_analyzed: int
    interval_seconds: float
    processing_time_ms: int
    token_usage: VideoTokenUsage


class VideoAnalysisResult(CamelModel):
    summary: Optional[Dict[str, Any]] = None
    frame_analyses: List[FrameAnalysis] = Field(default_factory=list)
    aggregated_analysis: AggregatedAnalysis = Field(default_factory=AggregatedAnalysis)
    metadata: VideoAnalysisMetadata
