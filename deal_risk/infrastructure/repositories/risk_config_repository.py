"""SQLAlchemy implementation of RiskConfigRepository."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from deal_risk.core.clock import as_naive_utc
from deal_risk.domain.entities import (
    BandThresholds,
    FactorWeights,
    RiskConfig,
    RiskPreset,
)
from deal_risk.domain.exceptions import RiskConfigVersionConflictException
from deal_risk.domain.interfaces import RiskConfigRepository
from deal_risk.infrastructure.database.models import RiskConfigModel


class SqlAlchemyRiskConfigRepository(RiskConfigRepository):
    """
    SQL implementation of the versioned config repository.

    The (team_id, version) unique constraint is what makes concurrent
    saves of the same version fail instead of silently forking.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_latest(self, team_id: str) -> Optional[RiskConfig]:
        """Retrieve the highest config version of a team."""
        stmt = (
            select(RiskConfigModel)
            .where(RiskConfigModel.team_id == team_id)
            .order_by(RiskConfigModel.version.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._to_entity(model)

    async def add(self, config: RiskConfig) -> RiskConfig:
        """Insert a new config version."""
        model = RiskConfigModel(
            id=str(config.id),
            team_id=config.team_id,
            version=config.version,
            preset=config.preset.value,
            weights=config.weights.to_dict(),
            decay_half_life_days=config.decay_half_life_days,
            baseline_score=config.baseline_score,
            low_max=config.band_thresholds.low_max,
            high_min=config.band_thresholds.high_min,
            created_at=config.created_at,
        )

        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise RiskConfigVersionConflictException(config.team_id, config.version) from e

        return config

    def _to_entity(self, model: RiskConfigModel) -> RiskConfig:
        """Convert database model to domain entity."""
        return RiskConfig(
            id=UUID(model.id),
            team_id=model.team_id,
            version=model.version,
            preset=RiskPreset(model.preset),
            weights=FactorWeights.from_dict(model.weights),
            decay_half_life_days=model.decay_half_life_days,
            baseline_score=model.baseline_score,
            band_thresholds=BandThresholds(
                low_max=model.low_max,
                high_min=model.high_min,
            ),
            created_at=as_naive_utc(model.created_at),
        )
