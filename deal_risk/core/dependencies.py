"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends

from deal_risk.application.services import RiskConfigService, RiskService
from deal_risk.application.services.config_loader import UnitOfWorkFactory
from deal_risk.domain.interfaces import DealDataClient
from deal_risk.infrastructure.clients import HttpDealDataClient
from deal_risk.infrastructure.database import db_manager
from deal_risk.infrastructure.repositories import sqlalchemy_uow_factory


# Persistence dependencies
def get_uow_factory() -> UnitOfWorkFactory:
    """Get a factory opening one unit of work (and session) per call."""
    return sqlalchemy_uow_factory(db_manager.sessionmaker)


# External client dependencies
def get_deal_client() -> DealDataClient:
    """Get a DealDataClient instance."""
    return HttpDealDataClient()


# Service dependencies
def get_risk_service(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
    deal_client: Annotated[DealDataClient, Depends(get_deal_client)],
) -> RiskService:
    """Get a RiskService instance with all dependencies."""
    return RiskService(uow_factory=uow_factory, deal_client=deal_client)


def get_risk_config_service(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
    risk_service: Annotated[RiskService, Depends(get_risk_service)],
) -> RiskConfigService:
    """Get a RiskConfigService instance."""
    return RiskConfigService(uow_factory=uow_factory, risk_service=risk_service)
