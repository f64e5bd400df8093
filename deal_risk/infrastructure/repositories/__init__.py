"""Repository implementations."""

from .risk_config_repository import SqlAlchemyRiskConfigRepository
from .risk_event_repository import SqlAlchemyRiskEventRepository
from .risk_score_repository import SqlAlchemyRiskScoreRepository
from .unit_of_work import SqlAlchemyRiskUnitOfWork, sqlalchemy_uow_factory

__all__ = [
    "SqlAlchemyRiskConfigRepository",
    "SqlAlchemyRiskEventRepository",
    "SqlAlchemyRiskScoreRepository",
    "SqlAlchemyRiskUnitOfWork",
    "sqlalchemy_uow_factory",
]
