"""Risk service - orchestrates deal risk recomputation and score queries."""

import asyncio
from datetime import date, timedelta
from typing import List, Optional, Sequence

import structlog

from deal_risk.application.dto import FailedDeal, RecalculationResult
from deal_risk.application.locks import DealLockRegistry, deal_locks
from deal_risk.core.clock import utcnow
from deal_risk.core.config import settings
from deal_risk.core.metrics import (
    record_bulk_batch,
    record_recompute_failure,
    record_score_computed,
    track_recompute_latency,
)
from deal_risk.domain.entities import (
    RiskConfig,
    RiskDistribution,
    RiskEvent,
    RiskScore,
    RiskTrigger,
    resolve_preset,
)
from deal_risk.domain.exceptions import (
    DealDataAccessException,
    DealNotFoundException,
    DomainException,
    RiskConfigurationException,
    ValidationException,
)
from deal_risk.domain.interfaces import DealDataClient
from deal_risk.service.scoring import ScoringSettings, score_deal, scoring_settings

from .config_loader import UnitOfWorkFactory, load_active_config

logger = structlog.get_logger(__name__)


class RiskService:
    """
    Application service for deal risk use cases.

    Every recompute of a deal runs under that deal's lock and in its own
    unit of work, so concurrent recomputes of one deal are serialized and
    a bulk run commits deal by deal.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        deal_client: DealDataClient,
        locks: DealLockRegistry = deal_locks,
        concurrency: int = settings.risk_recalc_concurrency,
        scoring: ScoringSettings = scoring_settings,
        events_default_limit: int = settings.risk_events_default_limit,
        events_max_limit: int = settings.risk_events_max_limit,
    ):
        self._uow_factory = uow_factory
        self._deal_client = deal_client
        self._locks = locks
        self._concurrency = max(1, concurrency)
        self._scoring = scoring
        self._events_default_limit = events_default_limit
        self._events_max_limit = events_max_limit

    async def calculate_risk_score(
        self,
        deal_id: str,
        team_id: str,
        trigger: RiskTrigger = RiskTrigger.MANUAL,
        as_of: Optional[date] = None,
        config: Optional[RiskConfig] = None,
    ) -> RiskScore:
        """
        Recompute, persist and audit the risk score of one deal.

        Args:
            deal_id: The deal's identifier
            team_id: The owning team
            trigger: What caused the recompute
            as_of: Reference date for decay (defaults to today, UTC)
            config: Config snapshot to use; loads the active one if omitted

        Returns:
            The newly persisted RiskScore

        Raises:
            DealNotFoundException: If the deal doesn't exist for the team
            DealDataAccessException: If the deal data can't be fetched
            RiskConfigurationException: If the config can't be applied
        """
        log = logger.bind(team_id=team_id, deal_id=deal_id, trigger=trigger.value)

        try:
            with track_recompute_latency():
                async with self._locks.lock_for(team_id, deal_id):
                    score, previous = await self._recompute(deal_id, team_id, trigger, as_of, config)
        except DomainException as e:
            record_recompute_failure(e.code)
            log_failure = log.error if isinstance(e, RiskConfigurationException) else log.warning
            log_failure("risk_score_calculation_failed", error_code=e.code, error=e.message)
            raise

        record_score_computed(
            band=score.band.value,
            trigger=trigger.value,
            previous_band=previous.band.value if previous else None,
        )
        log.info(
            "risk_score_calculated",
            score=score.score,
            band=score.band.value,
            previous_score=score.previous_score,
            config_version=score.config_version,
        )
        return score

    async def _recompute(
        self,
        deal_id: str,
        team_id: str,
        trigger: RiskTrigger,
        as_of: Optional[date],
        config: Optional[RiskConfig],
    ):
        if config is None:
            config = await load_active_config(self._uow_factory, team_id)
        config = resolve_preset(config)

        history = await self._deal_client.fetch_deal_history(deal_id, team_id)
        if history.deal_id != deal_id:
            raise DealDataAccessException(
                f"Deal data API returned deal {history.deal_id} for {deal_id}"
            )
        if history.deal.team_id != team_id:
            raise DealNotFoundException(deal_id, team_id)

        now = utcnow()
        result = score_deal(history, config, as_of or now.date(), self._scoring)

        async with self._uow_factory() as uow:
            previous = await uow.scores.get(deal_id, team_id)

            computed_at = now
            if previous is not None and computed_at <= previous.computed_at:
                computed_at = previous.computed_at + timedelta(microseconds=1)

            score = RiskScore(
                deal_id=deal_id,
                team_id=team_id,
                score=result.score,
                band=result.band,
                config_version=result.config_version,
                factor_breakdown=result.factor_breakdown,
                previous_score=previous.score if previous else None,
                computed_at=computed_at,
            )
            await uow.scores.upsert(score)
            await uow.events.append(
                RiskEvent(
                    deal_id=deal_id,
                    team_id=team_id,
                    previous_score=score.previous_score,
                    new_score=score.score,
                    new_band=score.band,
                    factor_breakdown=result.factor_breakdown,
                    trigger=trigger,
                    config_version=result.config_version,
                    timestamp=computed_at,
                )
            )
            await uow.commit()

        return score, previous

    async def recalculate_all(
        self,
        team_id: str,
        trigger: RiskTrigger = RiskTrigger.SCHEDULED,
        config: Optional[RiskConfig] = None,
        as_of: Optional[date] = None,
    ) -> RecalculationResult:
        """
        Recompute every deal of a team against one config snapshot.

        A failing deal is recorded and does not stop the others. Only a
        failure to enumerate the team's deals propagates. Cancelling the
        caller cancels the deals still pending; deals already recomputed
        stay committed.

        Args:
            team_id: The team whose deals to recompute
            trigger: What caused the run
            config: Config snapshot to use; loads the active one if omitted
            as_of: Reference date for decay (defaults to today, UTC)

        Returns:
            RecalculationResult with the success count and the failures
        """
        log = logger.bind(team_id=team_id, trigger=trigger.value)

        if config is None:
            config = await load_active_config(self._uow_factory, team_id)
        config = resolve_preset(config)

        deal_ids = list(dict.fromkeys(await self._deal_client.list_deal_ids(team_id)))
        record_bulk_batch(len(deal_ids))
        log.info(
            "bulk_recalculation_started",
            deal_count=len(deal_ids),
            config_version=config.version,
            concurrency=self._concurrency,
        )

        semaphore = asyncio.Semaphore(self._concurrency)

        async def recompute(deal_id: str) -> Optional[FailedDeal]:
            async with semaphore:
                try:
                    await self.calculate_risk_score(
                        deal_id, team_id, trigger=trigger, as_of=as_of, config=config,
                    )
                except DomainException as e:
                    return FailedDeal(deal_id=deal_id, reason=f"{e.code}: {e.message}")
                except Exception as e:
                    record_recompute_failure("INTERNAL_ERROR")
                    log.exception("deal_recalculation_error", deal_id=deal_id)
                    return FailedDeal(deal_id=deal_id, reason=f"INTERNAL_ERROR: {e}")
            return None

        outcomes = await asyncio.gather(*(recompute(deal_id) for deal_id in deal_ids))
        failed = [outcome for outcome in outcomes if outcome is not None]

        result = RecalculationResult(
            recalculated=len(deal_ids) - len(failed),
            failed=failed,
            config_version=config.version,
        )
        log.info(
            "bulk_recalculation_completed",
            recalculated=result.recalculated,
            failed=len(failed),
            config_version=config.version,
        )
        return result

    async def get_score(self, deal_id: str, team_id: str) -> Optional[RiskScore]:
        """Current score of a deal, or None if it has never been scored."""
        async with self._uow_factory() as uow:
            return await uow.scores.get(deal_id, team_id)

    async def get_scores(self, team_id: str, deal_ids: Sequence[str]) -> List[RiskScore]:
        """Current scores of several deals; unscored deals are omitted."""
        unique_ids = list(dict.fromkeys(deal_ids))
        if not unique_ids:
            return []
        async with self._uow_factory() as uow:
            return await uow.scores.get_many(team_id, unique_ids)

    async def get_events(
        self,
        deal_id: str,
        team_id: str,
        limit: Optional[int] = None,
    ) -> List[RiskEvent]:
        """
        A deal's audit events, newest first.

        Raises:
            ValidationException: If limit is not positive
        """
        if limit is None:
            limit = self._events_default_limit
        if limit <= 0:
            raise ValidationException("limit", ["limit must be positive"])
        limit = min(limit, self._events_max_limit)

        async with self._uow_factory() as uow:
            return await uow.events.get_by_deal(deal_id, team_id, limit=limit)

    async def get_distribution(self, team_id: str) -> RiskDistribution:
        """Count of the team's currently scored deals per band."""
        async with self._uow_factory() as uow:
            return await uow.scores.get_distribution(team_id)
