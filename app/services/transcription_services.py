from typing import Any, Dict

from loguru import logger

from mediascribe.pipeline import TranscriptionPipeline, build_request
from app.schemas.transcribe import TranscribeRequest
from app.utilities.request_context import request_context


async def transcribe_media(pipeline: TranscriptionPipeline, body: TranscribeRequest) -> Dict[str, Any]:
    """Validate the body, run the pipeline and return the camelCase payload.

    Errors propagate as mediascribe exceptions; the app's exception handlers
    turn them into 400/500 responses. Every log line of the request carries
    its ``request_id``.
    """
    with request_context() as request_id:
        request = build_request(body.url, body.summarization_prompt)
        logger.info(
            f"Request {request_id} received: url={request.url}, "
            f"custom_prompt={request.summarization_prompt is not None}"
        )
        response = await pipeline.run(request)
        return response.to_payload()
