from loguru import logger
from typing import Dict, Any
from mediascribe.exceptions import TranscriptionException
from mediascribe.providers.base import TranscriptionProvider
from mediascribe.utils.error_handler import convert_exceptions
from openai import OpenAIError
from .client import create_async_client


class OpenAITranscriptionProvider(TranscriptionProvider):
    """OpenAI Whisper transcription provider implementation."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.client = create_async_client(config)

    @convert_exceptions({OpenAIError: TranscriptionException, OSError: TranscriptionException})
    async def transcribe_file(self, audio_path: str, language: str = None, **kwargs) -> str:
        """Transcribe audio file using OpenAI Whisper."""
        model = self.config.get("model", "whisper-1")
        request_kwargs = dict(kwargs)
        if language:
            request_kwargs["language"] = language

        try:
            with open(audio_path, "rb") as audio_file:
                response = await self.client.audio.transcriptions.create(
                    model=model,
                    file=audio_file,
                    **request_kwargs
                )
        except OpenAIError as e:
            logger.error(f"OpenAI Whisper file transcription failed: {e}")
            raise

        return response.text or ""

    async def close(self):
        """Close the transcription client and cleanup resources."""
        if self.client:
            logger.info("Closing OpenAI transcription client")
            await self.client.close()
