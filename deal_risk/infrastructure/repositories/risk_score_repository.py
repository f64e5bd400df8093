"""SQLAlchemy implementation of RiskScoreRepository."""

from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from deal_risk.core.clock import as_naive_utc
from deal_risk.domain.entities import RiskBand, RiskDistribution, RiskScore
from deal_risk.domain.interfaces import RiskScoreRepository
from deal_risk.infrastructure.database.models import RiskScoreModel


class SqlAlchemyRiskScoreRepository(RiskScoreRepository):
    """SQL implementation of the current-score repository."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, deal_id: str, team_id: str) -> Optional[RiskScore]:
        """Retrieve the current score of a deal."""
        model = await self._session.get(RiskScoreModel, (team_id, deal_id))

        if model is None:
            return None

        return self._to_entity(model)

    async def get_many(self, team_id: str, deal_ids: Sequence[str]) -> List[RiskScore]:
        """Retrieve current scores for several deals, ordered by deal_id."""
        stmt = (
            select(RiskScoreModel)
            .where(
                RiskScoreModel.team_id == team_id,
                RiskScoreModel.deal_id.in_(list(deal_ids)),
            )
            .order_by(RiskScoreModel.deal_id)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def upsert(self, score: RiskScore) -> RiskScore:
        """Insert or overwrite the current score of a deal."""
        model = await self._session.get(RiskScoreModel, (score.team_id, score.deal_id))

        if model is None:
            model = RiskScoreModel(team_id=score.team_id, deal_id=score.deal_id)
            self._session.add(model)

        model.score = score.score
        model.band = score.band.value
        model.previous_score = score.previous_score
        model.config_version = score.config_version
        model.factor_breakdown = dict(score.factor_breakdown)
        model.computed_at = score.computed_at

        await self._session.flush()

        return score

    async def get_distribution(self, team_id: str) -> RiskDistribution:
        """Count the team's current scores per band."""
        stmt = (
            select(RiskScoreModel.band, func.count())
            .where(RiskScoreModel.team_id == team_id)
            .group_by(RiskScoreModel.band)
        )
        result = await self._session.execute(stmt)
        counts = {band: count for band, count in result.all()}

        return RiskDistribution(
            low=counts.get(RiskBand.LOW.value, 0),
            medium=counts.get(RiskBand.MEDIUM.value, 0),
            high=counts.get(RiskBand.HIGH.value, 0),
        )

    def _to_entity(self, model: RiskScoreModel) -> RiskScore:
        """Convert database model to domain entity."""
        return RiskScore(
            deal_id=model.deal_id,
            team_id=model.team_id,
            score=model.score,
            band=RiskBand(model.band),
            config_version=model.config_version,
            factor_breakdown=dict(model.factor_breakdown),
            previous_score=model.previous_score,
            computed_at=as_naive_utc(model.computed_at),
        )
