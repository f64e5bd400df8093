"""Health check endpoint for service monitoring."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from deal_risk import __version__
from deal_risk.application.services.config_loader import UnitOfWorkFactory
from deal_risk.core.dependencies import get_uow_factory

logger = structlog.get_logger(__name__)

health_router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Reports service health; 503 when the database cannot be reached.",
    responses={503: {"model": HealthResponse, "description": "Database unavailable"}},
)
async def health_check(
    response: Response,
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> HealthResponse:
    try:
        async with uow_factory() as uow:
            await uow.ping()
    except Exception as e:
        logger.warning("health_check_database_unavailable", error=str(e), error_type=type(e).__name__)
        response.status_code = 503
        return HealthResponse(status="degraded", version=__version__, database="unavailable")

    return HealthResponse(status="healthy", version=__version__, database="ok")
