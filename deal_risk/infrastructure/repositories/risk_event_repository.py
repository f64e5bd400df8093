"""SQLAlchemy implementation of RiskEventRepository."""

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from deal_risk.core.clock import as_naive_utc
from deal_risk.domain.entities import RiskBand, RiskEvent, RiskTrigger
from deal_risk.domain.interfaces import RiskEventRepository
from deal_risk.infrastructure.database.models import RiskEventModel


class SqlAlchemyRiskEventRepository(RiskEventRepository):
    """
    SQL implementation of the event ledger.

    Insert and read only: events are never updated or deleted.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def append(self, event: RiskEvent) -> RiskEvent:
        """Insert an event."""
        model = RiskEventModel(
            id=str(event.id),
            team_id=event.team_id,
            deal_id=event.deal_id,
            previous_score=event.previous_score,
            new_score=event.new_score,
            new_band=event.new_band.value,
            factor_breakdown=dict(event.factor_breakdown),
            trigger=event.trigger.value,
            config_version=event.config_version,
            timestamp=event.timestamp,
        )

        self._session.add(model)
        await self._session.flush()

        return event

    async def get_by_deal(
        self,
        deal_id: str,
        team_id: str,
        limit: int = 50,
    ) -> List[RiskEvent]:
        """Retrieve a deal's events, ordered by timestamp descending."""
        stmt = (
            select(RiskEventModel)
            .where(
                RiskEventModel.team_id == team_id,
                RiskEventModel.deal_id == deal_id,
            )
            .order_by(RiskEventModel.timestamp.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    def _to_entity(self, model: RiskEventModel) -> RiskEvent:
        """Convert database model to domain entity."""
        return RiskEvent(
            id=UUID(model.id),
            deal_id=model.deal_id,
            team_id=model.team_id,
            previous_score=model.previous_score,
            new_score=model.new_score,
            new_band=RiskBand(model.new_band),
            factor_breakdown=dict(model.factor_breakdown),
            trigger=RiskTrigger(model.trigger),
            config_version=model.config_version,
            timestamp=as_naive_utc(model.timestamp),
        )
