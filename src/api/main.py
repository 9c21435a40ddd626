"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.communications.cache import ResponseCache
from src.components.common.component import QanaryComponent
from src.components.common.exceptions import (
    ComponentError,
    LanguageNotSupportedError,
    RequestFailedError,
    ResultFormatError,
    TriplestoreError,
)
from src.components.qanswer.component import QAnswerComponent
from src.components.qanswer.config import load_qanswer_settings
from src.components.rubq.component import RuBQComponent
from src.components.rubq.config import load_rubq_settings
from src.utils.exceptions import BaseAppException
from src.utils.logging import apply_logger_levels, log_performance, setup_logging

from .config import APISettings, settings
from .models import ErrorResponse
from .dependencies import QANSWER, RUBQ, get_components, set_component
from .routes import annotate_router, query_router, health_router

logger = logging.getLogger(__name__)

# checked in order, first match wins
ERROR_STATUS_CODES = (
    (LanguageNotSupportedError, 400),
    (ResultFormatError, 502),
    (RequestFailedError, 502),
    (TriplestoreError, 502),
    (ComponentError, 422),
)


def status_code_for(error: BaseAppException) -> int:
    for error_cls, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_cls):
            return status_code
    return 500


@log_performance(logger)
def build_components(api_settings: APISettings) -> Dict[str, QanaryComponent]:
    """Create the enabled components, each with its own response cache."""
    components: Dict[str, QanaryComponent] = {}

    if api_settings.enable_qanswer:
        qanswer_settings = load_qanswer_settings(api_settings.config_path)
        apply_logger_levels({"src.components.qanswer": qanswer_settings.log_level})
        components[QANSWER] = QAnswerComponent.from_settings(
            qanswer_settings, ResponseCache(qanswer_settings.cache_config())
        )

    if api_settings.enable_rubq:
        rubq_settings = load_rubq_settings(api_settings.config_path)
        apply_logger_levels({"src.components.rubq": rubq_settings.log_level})
        components[RUBQ] = RuBQComponent.from_settings(
            rubq_settings, ResponseCache(rubq_settings.cache_config())
        )

    return components


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    setup_logging()
    logger.info("Starting Qanary QA components API...")

    try:
        for name, component in build_components(settings).items():
            set_component(name, component)
            logger.info(f"Component '{name}' ready: {component.application_name}")
    except BaseAppException as e:
        logger.error(f"Failed to initialize components: {e}")
        logger.warning("API will start without the components that failed")

    yield

    # Shutdown
    logger.info("Shutting down Qanary QA components API...")
    for name, component in get_components().items():
        component.query_builder.client.close()
        component.http_client.close()
        set_component(name, None)


# Create FastAPI app
app = FastAPI(
    title="Qanary QA Components API",
    description="Question answering components with cached access to external QA services",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health_router, prefix="/api")
app.include_router(annotate_router, prefix="/api")
app.include_router(query_router, prefix="/api")


@app.exception_handler(BaseAppException)
async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    status_code = status_code_for(exc)
    logger.error(f"{request.method} {request.url.path} failed with {status_code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error_code=exc.error_code or exc.__class__.__name__,
            message=exc.message,
            details=exc.details,
        ).model_dump(mode="json")
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Qanary QA Components API",
        "version": "1.0.0",
        "docs": "/docs"
    }
