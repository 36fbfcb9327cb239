"""
FastAPI server entry point.
"""

import logging
import logging.config
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from .containers import Container
from .api.v1 import predict_router
from .exceptions import PredictionServiceError, ModelLoadError, PREDICTION_FAILED_MESSAGE
from .libs.log_context import RequestIdFilter, new_request_id

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
        },
    },
    "filters": {
        "request_id_filter": {
            "()": RequestIdFilter,
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "filters": ["request_id_filter"],
            "stream": "ext://sys.stdout",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
}

logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID and logs every request/response pair. Upload bodies are never logged."""

    async def dispatch(self, request: Request, call_next):
        request_id = new_request_id()
        start_time = time.time()
        method = request.method
        path = request.url.path

        content_length = request.headers.get("content-length")
        if content_length:
            logger.info(f">>> {method} {path} | {content_length} bytes")
        else:
            logger.info(f">>> {method} {path}")

        response = await call_next(request)

        duration = time.time() - start_time
        logger.info(f"<<< {method} {path} | {response.status_code} | {duration:.3f}s")

        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan. The model must load before any request is served."""
    logger.info("Starting prediction server...")

    container = app.state.container
    container.wire(
        modules=[
            "src.api.v1.predict",
        ]
    )

    try:
        container.config()
    except ValidationError as e:
        logger.critical(f"Invalid configuration, refusing to start: {e}")
        raise

    try:
        container.classifier()
    except ModelLoadError as e:
        logger.critical(f"Error loading model, refusing to start: {e}")
        raise
    logger.info("Model loaded successfully")

    store = container.store()

    logger.info("Prediction server started successfully")

    yield

    logger.info("Shutting down prediction server...")
    await store.close()
    container.unwire()
    logger.info("Prediction server shut down")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Cancer Screening Prediction API",
        description="Classifies uploaded images as Cancer / Non-cancer and keeps a prediction history",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container or Container()

    # Add request logging middleware (must be added before CORS)
    app.add_middleware(RequestLoggingMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    @app.exception_handler(PredictionServiceError)
    async def prediction_service_error_handler(request: Request, exc: PredictionServiceError):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    # Missing "image" field or malformed multipart data
    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={"status": "fail", "message": PREDICTION_FAILED_MESSAGE},
        )

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # Register API routers
    app.include_router(predict_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    from .config import Settings

    settings = Settings()

    uvicorn.run(
        "src.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
