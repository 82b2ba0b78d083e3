from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.routers import transcribe
from mediascribe import __version__
from mediascribe.config.settings import MediaScribeConfig
from mediascribe.exceptions import ConfigurationException, PipelineFailure, ValidationException
from mediascribe.pipeline import INVALID_URL_MESSAGE, TranscriptionPipeline
from mediascribe.providers.factory import ProviderBundle
from mediascribe.utils.logging_config import log_manager

PIPELINE_FAILURE_MESSAGE = "Failed to transcribe audio"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def create_app(
    config: Optional[MediaScribeConfig] = None,
    providers: Optional[ProviderBundle] = None,
    base_path: Optional[str] = None,
) -> FastAPI:
    """
    Build the HTTP service.

    Args:
        config: Application config, read from the environment when omitted
        providers: Pre-built provider clients; created lazily on the first
            request when omitted
        base_path: Route prefix for the API, defaults to ``config.server.api_base_path``
    """
    config = config or MediaScribeConfig()
    prefix = base_path if base_path is not None else config.server.api_base_path

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log_manager.configure(config.logging)
        logger.info(f"{config.app_name} {config.app_version} started, API at {prefix or '/'}")
        yield
        await app.state.pipeline.close()
        logger.info("Provider clients closed")

    app = FastAPI(
        title="MediaScribe API",
        description="Transcription, sentiment analysis and summarization of remote audio and video",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.pipeline = TranscriptionPipeline(config=config, providers=providers)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(transcribe.router, prefix=prefix)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request body on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": INVALID_URL_MESSAGE})

    @app.exception_handler(ValidationException)
    async def validation_handler(request: Request, exc: ValidationException):
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(ConfigurationException)
    async def configuration_handler(request: Request, exc: ConfigurationException):
        return JSONResponse(status_code=500, content={"error": exc.message})

    @app.exception_handler(PipelineFailure)
    async def pipeline_failure_handler(request: Request, exc: PipelineFailure):
        return JSONResponse(
            status_code=500,
            content={"error": PIPELINE_FAILURE_MESSAGE, "message": exc.message, "url": exc.url},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"Unhandled error on {request.url.path}: {exc}")
        content = {"error": INTERNAL_ERROR_MESSAGE}
        if config.debug:
            content["message"] = str(exc) or type(exc).__name__
        return JSONResponse(status_code=500, content=content)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


app = create_app()


if __name__ == "__main__":
    server = app.state.config.server
    uvicorn.run(app, host=server.host, port=server.port)
