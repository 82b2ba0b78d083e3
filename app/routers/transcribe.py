from fastapi import APIRouter, Depends, Request

from app.schemas.transcribe import ErrorResponse, TranscribeRequest
from app.services.transcription_services import transcribe_media
from mediascribe.pipeline import TranscriptionPipeline

router = APIRouter(tags=["transcription"])


def get_pipeline(request: Request) -> TranscriptionPipeline:
    return request.app.state.pipeline


@router.post(
    "/transcribe",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def transcribe(body: TranscribeRequest, pipeline: TranscriptionPipeline = Depends(get_pipeline)):
    """Transcribe the audio of a remote audio/video file, with sentiment and summary."""
    return await transcribe_media(pipeline, body)
