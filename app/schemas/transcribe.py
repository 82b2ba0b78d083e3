from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TranscribeRequest(BaseModel):
    # Left untyped so wrong types reach the pipeline's own validation
    url: Any = Field(default=None, examples=["https://example.com/media/interview.mp4"])
    summarization_prompt: Any = Field(default=None, alias="summarizationPrompt")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "url": "https://example.com/media/interview.mp4",
                },
                {
                    "url": "https://example.com/media/podcast.mp3",
                    "summarizationPrompt": "Summarize the key product feedback in three bullet points."
                }
            ]
        }
    )


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    url: Optional[str] = None
