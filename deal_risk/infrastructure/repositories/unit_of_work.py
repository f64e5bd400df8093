"""SQLAlchemy unit of work over the risk repositories."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker

from deal_risk.domain.interfaces import RiskUnitOfWork

from .risk_config_repository import SqlAlchemyRiskConfigRepository
from .risk_event_repository import SqlAlchemyRiskEventRepository
from .risk_score_repository import SqlAlchemyRiskScoreRepository


class SqlAlchemyRiskUnitOfWork(RiskUnitOfWork):
    """
    Opens one session per unit of work; all three repositories share it.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session = session_factory()
        self.configs = SqlAlchemyRiskConfigRepository(self._session)
        self.scores = SqlAlchemyRiskScoreRepository(self._session)
        self.events = SqlAlchemyRiskEventRepository(self._session)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def close(self) -> None:
        await self._session.close()

    async def ping(self) -> None:
        await self._session.execute(text("SELECT 1"))


def sqlalchemy_uow_factory(session_factory: async_sessionmaker):
    """Build a zero-argument factory producing units of work on ``session_factory``."""

    def factory() -> SqlAlchemyRiskUnitOfWork:
        return SqlAlchemyRiskUnitOfWork(session_factory)

    return factory
