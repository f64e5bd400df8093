"""Risk config service - versioned team configuration and its recompute."""

from typing import List

import structlog

from deal_risk.application.dto import RiskConfigInput, SaveConfigResult
from deal_risk.domain.entities import RiskConfig, RiskTrigger, list_presets
from deal_risk.domain.exceptions import RiskConfigValidationException

from .config_loader import UnitOfWorkFactory, load_active_config
from .risk_service import RiskService

logger = structlog.get_logger(__name__)


class RiskConfigService:
    """
    Application service for team risk configuration.

    Configs are append-only: each save inserts version + 1 and immediately
    recomputes every deal of the team against the saved version.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, risk_service: RiskService):
        self._uow_factory = uow_factory
        self._risk_service = risk_service

    async def get_config(self, team_id: str) -> RiskConfig:
        """
        Get the team's active config.

        Never fails for an unknown team: the default preset is created as
        version 1 on first access.
        """
        _require_team_id(team_id)
        return await load_active_config(self._uow_factory, team_id)

    async def save_config(self, team_id: str, config_input: RiskConfigInput) -> SaveConfigResult:
        """
        Validate and persist a new config version, then recompute the team.

        Args:
            team_id: The team whose config to replace
            config_input: Preset key or full custom parameters

        Returns:
            SaveConfigResult with the saved config and the recompute outcome

        Raises:
            RiskConfigValidationException: If the input is invalid
            RiskConfigVersionConflictException: If a concurrent save won
            DealDataAccessException: If the team's deals can't be listed
        """
        _require_team_id(team_id)

        errors = config_input.validate()
        if errors:
            raise RiskConfigValidationException(
                field=errors[0][0],
                errors=[message for _, message in errors],
            )

        log = logger.bind(team_id=team_id, preset=config_input.preset)

        current = await load_active_config(self._uow_factory, team_id)
        async with self._uow_factory() as uow:
            saved = await uow.configs.add(config_input.to_config(team_id, current.version + 1))
            await uow.commit()

        log.info("risk_config_saved", version=saved.version)

        recalculation = await self._risk_service.recalculate_all(
            team_id,
            trigger=RiskTrigger.CONFIG_CHANGE,
            config=saved,
        )
        return SaveConfigResult(config=saved, recalculation=recalculation)

    def list_presets(self) -> List[dict]:
        """The fixed preset catalog."""
        return list_presets()


def _require_team_id(team_id: str) -> None:
    if not team_id or not team_id.strip():
        raise RiskConfigValidationException("team_id", ["team_id is required"])
