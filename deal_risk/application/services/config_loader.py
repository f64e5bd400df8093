"""Loading of a team's active risk configuration."""

from typing import Callable

import structlog

from deal_risk.domain.entities import DEFAULT_PRESET, RiskConfig, preset_config, resolve_preset
from deal_risk.domain.exceptions import (
    RiskConfigurationException,
    RiskConfigVersionConflictException,
)
from deal_risk.domain.interfaces import RiskUnitOfWork

logger = structlog.get_logger(__name__)

UnitOfWorkFactory = Callable[[], RiskUnitOfWork]


async def load_active_config(uow_factory: UnitOfWorkFactory, team_id: str) -> RiskConfig:
    """
    Return the team's active config, creating version 1 on first access.

    A team that never saved a config gets the default preset. When two
    first accesses race, the loser of the insert re-reads the winner's
    row, so both end up with the same version 1.

    Returns:
        The active config with preset parameters resolved to their
        canonical values
    """
    async with uow_factory() as uow:
        config = await uow.configs.get_latest(team_id)
        if config is not None:
            return resolve_preset(config)

        try:
            config = await uow.configs.add(preset_config(team_id, DEFAULT_PRESET, version=1))
            await uow.commit()
        except RiskConfigVersionConflictException:
            await uow.rollback()
            config = None

    if config is None:
        async with uow_factory() as uow:
            config = await uow.configs.get_latest(team_id)
        if config is None:
            raise RiskConfigurationException("Default config could not be created", team_id=team_id)
        logger.info("risk_config_default_race_resolved", team_id=team_id)
    else:
        logger.info("risk_config_default_created", team_id=team_id, preset=DEFAULT_PRESET.value)

    return resolve_preset(config)
