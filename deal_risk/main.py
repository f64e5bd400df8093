"""
Deal Risk service entry point.

Serves the risk API, the health check and Prometheus metrics. Run with
``uvicorn deal_risk.main:app``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from deal_risk import __version__
from deal_risk.core.config import settings
from deal_risk.core.logging import setup_logging
from deal_risk.core.metrics import get_metrics, get_metrics_content_type
from deal_risk.infrastructure.database import db_manager
from deal_risk.presentation.api import api_router
from deal_risk.presentation.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    error_handler_middleware,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    db_manager.init()
    if settings.db_create_tables:
        await db_manager.create_tables()
    logger.info("application_started", version=__version__)

    yield

    await db_manager.close()
    logger.info("application_stopped")


async def metrics() -> Response:
    """Prometheus scrape endpoint; 404 when metrics are disabled."""
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


async def docs_redirect() -> RedirectResponse:
    return RedirectResponse(url="/docs")


def create_app() -> FastAPI:
    """Build the FastAPI application with its middleware and routes."""
    application = FastAPI(
        title="Deal Risk",
        description="Per-deal 0-100 risk scores under versioned team configurations",
        version=__version__,
        lifespan=lifespan,
    )

    # Added in reverse: the request id must be bound before requests are logged
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(LoggingMiddleware)
    application.add_middleware(RequestContextMiddleware)

    error_handler_middleware(application)
    application.include_router(api_router)
    application.add_api_route("/metrics", metrics, methods=["GET"], include_in_schema=False)
    application.add_api_route("/", docs_redirect, methods=["GET"], include_in_schema=False)
    return application


app = create_app()
