"""
Speech-to-text plus the two transcript enrichments.

Transcription is on the critical path and raises on failure. Sentiment and
summary are enrichments: they never raise and degrade to fixed fallback values
with ``error=True``.
"""

import json
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, Field, field_validator

from mediascribe.exceptions import TranscriptionException
from mediascribe.models import SentimentResult, SummaryResult, TokenUsage, TranscriptionResult
from mediascribe.prompts import (
    DEFAULT_SUMMARIZATION_PROMPT,
    SENTIMENT_SYSTEM_PROMPT,
    SENTIMENT_USER_TEMPLATE,
    SUMMARY_USER_TEMPLATE,
)
from mediascribe.providers.base import LLMProvider, TranscriptionProvider
from mediascribe.utils.error_handler import ErrorHandler
from mediascribe.utils.execution_timer import ExecutionTimer

SENTIMENT_MAX_TOKENS = 500
SUMMARY_MAX_TOKENS = 1500

SENTIMENT_FALLBACK_SUMMARY = "Sentiment analysis could not be completed"
SUMMARY_FALLBACK_TEXT = "Summarization could not be completed due to an error."


class SentimentPayload(BaseModel):
    """Shape the sentiment prompt asks the model to return."""
    sentiment: str
    confidence: float = 0.0
    emotions: List[str] = Field(default_factory=list)
    summary: str = ""

    @field_validator("sentiment")
    @classmethod
    def known_label(cls, value: str) -> str:
        label = value.strip().lower()
        if label not in {"positive", "negative", "neutral", "mixed"}:
            raise ValueError(f"unknown sentiment label {value!r}")
        return label

    @field_validator("confidence")
    @classmethod
    def clamp_confidence(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)

    @field_validator("emotions", mode="before")
    @classmethod
    def unique_emotions(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        seen = []
        for item in value:
            emotion = str(item).strip()
            if emotion and emotion not in seen:
                seen.append(emotion)
        return seen


def count_words(text: str) -> int:
    return len(text.split())


class TranscriptionAnalysisClient:
    """Wraps the speech-to-text, sentiment and summary model calls."""

    def __init__(self, transcription_provider: TranscriptionProvider, llm_provider: LLMProvider):
        self.transcription_provider = transcription_provider
        self.llm_provider = llm_provider

    async def transcribe(self, audio_path: str) -> TranscriptionResult:
        """
        Transcribe an audio file.

        Raises:
            TranscriptionException: On any provider failure
        """
        logger.info(f"Starting Whisper transcription of {audio_path}")
        with ExecutionTimer() as timer:
            try:
                text = await self.transcription_provider.transcribe_file(audio_path)
            except TranscriptionException:
                raise
            except Exception as e:
                raise ErrorHandler.handle_provider_error(e, "transcription", TranscriptionException) from e

        text = text or ""
        result = TranscriptionResult(
            text=text,
            length=len(text),
            word_count=count_words(text),
            processing_time_ms=timer.elapsed_ms,
        )
        logger.info(
            f"Transcription completed successfully: {result.length} chars, "
            f"{result.word_count} words in {result.processing_time_ms}ms"
        )
        return result

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        """Classify the transcript's sentiment. Never raises."""
        logger.info("Starting sentiment analysis")
        messages = [
            {"role": "system", "content": SENTIMENT_SYSTEM_PROMPT},
            {"role": "user", "content": SENTIMENT_USER_TEMPLATE.format(text=text)},
        ]
        usage = TokenUsage()
        timer = ExecutionTimer()
        try:
            with timer:
                response = await self.llm_provider.chat_completion(
                    messages,
                    response_format={"type": "json_object"},
                    max_tokens=SENTIMENT_MAX_TOKENS,
                )
                usage = TokenUsage.from_usage(response.get("usage"))
                payload = SentimentPayload.model_validate(_parse_json_object(response.get("content")))
        except Exception as e:
            logger.opt(exception=True).error(f"Sentiment analysis failed: {e}")
            return SentimentResult(
                sentiment="neutral",
                confidence=0.0,
                emotions=[],
                summary=SENTIMENT_FALLBACK_SUMMARY,
                error=True,
                processing_time_ms=timer.elapsed_ms,
                token_usage=usage,
            )

        result = SentimentResult(
            sentiment=payload.sentiment,
            confidence=payload.confidence,
            emotions=payload.emotions,
            summary=payload.summary,
            error=False,
            processing_time_ms=timer.elapsed_ms,
            token_usage=usage,
        )
        logger.info(
            f"Sentiment analysis completed: {result.sentiment} ({result.confidence:.2f}) "
            f"in {result.processing_time_ms}ms, tokens={usage.total_tokens}"
        )
        return result

    async def summarize(self, text: str, prompt: Optional[str] = None) -> SummaryResult:
        """Free-text summary of the transcript. Never raises."""
        prompt_to_use = prompt or DEFAULT_SUMMARIZATION_PROMPT
        logger.info(f"Starting summarization (custom prompt: {bool(prompt)}, prompt length: {len(prompt_to_use)})")
        messages = [
            {"role": "system", "content": prompt_to_use},
            {"role": "user", "content": SUMMARY_USER_TEMPLATE.format(text=text)},
        ]
        usage = TokenUsage()
        timer = ExecutionTimer()
        try:
            with timer:
                response = await self.llm_provider.chat_completion(messages, max_tokens=SUMMARY_MAX_TOKENS)
                usage = TokenUsage.from_usage(response.get("usage"))
                content = response.get("content")
                if not isinstance(content, str):
                    raise ValueError("Summary response contained no text")
                summary = content.strip()
        except Exception as e:
            logger.opt(exception=True).error(f"Summarization failed: {e}")
            return SummaryResult(
                summary=SUMMARY_FALLBACK_TEXT,
                error=True,
                processing_time_ms=timer.elapsed_ms,
                token_usage=usage,
            )

        logger.info(
            f"Summarization completed: {len(summary)} chars in {timer.elapsed_ms}ms, tokens={usage.total_tokens}"
        )
        return SummaryResult(
            summary=summary,
            error=False,
            processing_time_ms=timer.elapsed_ms,
            token_usage=usage,
        )


def _parse_json_object(content: Any) -> Dict[str, Any]:
    if not isinstance(content, str):
        raise ValueError("Model response contained no text")
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
