"""
Integration tests for RiskService over a real database.

These tests verify:
1. Single-deal recompute persists the score and appends an event
2. Bulk recompute isolates per-deal failures
3. Concurrent recomputes of one deal are serialized
4. Cancelling a bulk run keeps the deals already committed
"""

import asyncio

import pytest
from structlog.testing import capture_logs

from deal_risk.application.locks import DealLockRegistry
from deal_risk.application.services import RiskService
from deal_risk.domain.entities import (
    BandThresholds,
    FactorWeights,
    RiskBand,
    RiskConfig,
    RiskFactor,
    RiskPreset,
    RiskTrigger,
)
from deal_risk.domain.exceptions import (
    DealDataAccessException,
    DealDataTimeoutException,
    DealNotFoundException,
    RiskConfigurationException,
    RiskConfigValidationException,
    ValidationException,
)
from deal_risk.service.scoring import ScoringSettings

from tests.helpers import (
    AS_OF,
    bounced_history,
    clean_history,
    empty_history,
    troubled_history,
)


async def wait_until_scored(service, team_id, deal_ids, timeout=5.0):
    """Poll until every deal in ``deal_ids`` has a committed score."""
    async def poll():
        while True:
            scores = await service.get_scores(team_id, deal_ids)
            if len(scores) == len(deal_ids):
                return
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout)


# =============================================================================
# Single Deal
# =============================================================================

class TestCalculateRiskScore:
    """Tests for RiskService.calculate_risk_score()."""

    @pytest.mark.asyncio
    async def test_first_score_is_persisted(self, risk_service, deal_client):
        deal_client.add(clean_history())

        score = await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)

        assert score.score == 6
        assert score.band == RiskBand.LOW
        assert score.previous_score is None
        assert score.config_version == 1

        stored = await risk_service.get_score("deal_1", "team_1")
        assert stored == score

    @pytest.mark.asyncio
    async def test_first_recompute_creates_default_config(self, risk_service, config_service, deal_client):
        deal_client.add(empty_history())

        score = await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)
        config = await config_service.get_config("team_1")

        assert config.version == 1
        assert config.preset.value == "balanced"
        assert score.score == config.baseline_score

    @pytest.mark.asyncio
    async def test_recompute_appends_event_chain(self, risk_service, deal_client):
        deal_client.add(clean_history())
        first = await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)

        deal_client.add(troubled_history())
        second = await risk_service.calculate_risk_score(
            "deal_1", "team_1", trigger=RiskTrigger.TRANSACTION_EVENT, as_of=AS_OF,
        )

        assert second.previous_score == first.score
        assert second.score == 29
        assert second.computed_at > first.computed_at

        events = await risk_service.get_events("deal_1", "team_1")
        assert [e.new_score for e in events] == [29, 6]
        assert [e.previous_score for e in events] == [6, None]
        assert [e.trigger for e in events] == [RiskTrigger.TRANSACTION_EVENT, RiskTrigger.MANUAL]
        assert events[0].timestamp == second.computed_at
        assert events[0].factor_breakdown == second.factor_breakdown

    @pytest.mark.asyncio
    async def test_unknown_deal_writes_nothing(self, risk_service):
        with pytest.raises(DealNotFoundException):
            await risk_service.calculate_risk_score("missing", "team_1", as_of=AS_OF)

        assert await risk_service.get_score("missing", "team_1") is None
        assert await risk_service.get_events("missing", "team_1") == []

    @pytest.mark.asyncio
    async def test_deal_of_another_team_is_not_found(self, risk_service, deal_client):
        deal_client.histories[("team_1", "deal_x")] = clean_history("deal_x", team_id="team_2")

        with pytest.raises(DealNotFoundException):
            await risk_service.calculate_risk_score("deal_x", "team_1", as_of=AS_OF)

    @pytest.mark.asyncio
    async def test_history_of_another_deal_writes_nothing(self, risk_service, deal_client):
        deal_client.histories[("team_1", "deal_1")] = troubled_history("deal_other")

        with pytest.raises(DealDataAccessException, match="deal_other"):
            await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)

        assert await risk_service.get_score("deal_1", "team_1") is None
        assert await risk_service.get_events("deal_1", "team_1") == []

    @pytest.mark.asyncio
    async def test_unusable_config_is_logged_as_error(self, risk_service, deal_client):
        deal_client.add(clean_history())
        config = RiskConfig(
            team_id="team_1",
            preset=RiskPreset.CUSTOM,
            weights=FactorWeights(**{f.value: 0.0 for f in RiskFactor}),
            decay_half_life_days=30,
            baseline_score=50,
            band_thresholds=BandThresholds(low_max=40, high_min=70),
        )

        with capture_logs() as logs:
            with pytest.raises(RiskConfigurationException):
                await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF, config=config)

        failures = [e for e in logs if e["event"] == "risk_score_calculation_failed"]
        assert [e["log_level"] for e in failures] == ["error"]
        assert failures[0]["error_code"] == "CONFIGURATION_ERROR"
        assert await risk_service.get_score("deal_1", "team_1") is None

    @pytest.mark.asyncio
    async def test_timeout_propagates(self, risk_service, deal_client):
        deal_client.fail("team_1", "deal_1", DealDataTimeoutException())

        with pytest.raises(DealDataTimeoutException):
            await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)

    @pytest.mark.asyncio
    async def test_concurrent_recomputes_of_one_deal_are_serialized(self, risk_service, deal_client):
        deal_client.add(clean_history())

        await asyncio.gather(*(
            risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)
            for _ in range(4)
        ))

        events = await risk_service.get_events("deal_1", "team_1")
        assert len(events) == 4
        # Newest first: each event's previous score is the next one's new score
        assert events[-1].previous_score is None
        assert all(e.previous_score == 6 for e in events[:-1])
        timestamps = [e.timestamp for e in events]
        assert timestamps == sorted(timestamps, reverse=True)
        assert len(set(timestamps)) == 4


# =============================================================================
# Bulk
# =============================================================================

class TestRecalculateAll:
    """Tests for RiskService.recalculate_all()."""

    @pytest.mark.asyncio
    async def test_recomputes_every_deal(self, risk_service, deal_client):
        for deal_id in ("deal_a", "deal_b", "deal_c"):
            deal_client.add(clean_history(deal_id))

        result = await risk_service.recalculate_all("team_1", as_of=AS_OF)

        assert result.recalculated == 3
        assert result.failed == []
        assert result.config_version == 1

        events = await risk_service.get_events("deal_b", "team_1")
        assert [e.trigger for e in events] == [RiskTrigger.SCHEDULED]

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, risk_service, deal_client):
        deal_client.add(clean_history("deal_a"))
        deal_client.fail("team_1", "deal_b", DealDataAccessException("Deal API error: boom", status_code=500))
        deal_client.add(troubled_history("deal_c"))
        deal_client.fail("team_1", "deal_d", RuntimeError("boom"))

        result = await risk_service.recalculate_all("team_1", as_of=AS_OF)

        assert result.recalculated == 2
        reasons = {f.deal_id: f.reason for f in result.failed}
        assert reasons == {
            "deal_b": "DATA_ACCESS_ERROR: Deal API error: boom",
            "deal_d": "INTERNAL_ERROR: boom",
        }

        scored = await risk_service.get_scores("team_1", ["deal_a", "deal_b", "deal_c", "deal_d"])
        assert [s.deal_id for s in scored] == ["deal_a", "deal_c"]
        assert await risk_service.get_events("deal_b", "team_1") == []

    @pytest.mark.asyncio
    async def test_mismatched_history_is_reported_as_data_access_error(self, risk_service, deal_client):
        deal_client.add(clean_history("deal_a"))
        deal_client.deal_ids["team_1"].append("deal_b")
        deal_client.histories[("team_1", "deal_b")] = clean_history("deal_a")

        result = await risk_service.recalculate_all("team_1", as_of=AS_OF)

        assert result.recalculated == 1
        assert [f.deal_id for f in result.failed] == ["deal_b"]
        assert result.failed[0].reason.startswith("DATA_ACCESS_ERROR: ")
        assert await risk_service.get_score("deal_b", "team_1") is None

    @pytest.mark.asyncio
    async def test_enumeration_failure_propagates(self, risk_service, deal_client):
        deal_client.add(clean_history())
        deal_client.list_failure = DealDataAccessException("Deal API error: down", status_code=503)

        with pytest.raises(DealDataAccessException):
            await risk_service.recalculate_all("team_1", as_of=AS_OF)

        assert deal_client.fetch_calls == []

    @pytest.mark.asyncio
    async def test_team_without_deals(self, risk_service):
        result = await risk_service.recalculate_all("team_empty", as_of=AS_OF)

        assert result.recalculated == 0
        assert result.failed == []

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_recomputed_once(self, risk_service, deal_client):
        deal_client.add(clean_history("deal_a"))
        deal_client.deal_ids["team_1"].append("deal_a")

        result = await risk_service.recalculate_all("team_1", as_of=AS_OF)

        assert result.recalculated == 1
        assert deal_client.fetch_calls == ["deal_a"]

    @pytest.mark.asyncio
    async def test_cancellation_keeps_completed_deals(self, risk_service, deal_client):
        deal_client.add(clean_history("deal_a"))
        deal_client.add(clean_history("deal_b"))
        deal_client.add(clean_history("deal_c"))
        started, _release = deal_client.block("deal_c")

        task = asyncio.create_task(risk_service.recalculate_all("team_1", as_of=AS_OF))
        await asyncio.wait_for(started.wait(), 5.0)
        await wait_until_scored(risk_service, "team_1", ["deal_a", "deal_b"])

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        scored = await risk_service.get_scores("team_1", ["deal_a", "deal_b", "deal_c"])
        assert [s.deal_id for s in scored] == ["deal_a", "deal_b"]
        assert await risk_service.get_events("deal_c", "team_1") == []


# =============================================================================
# Queries
# =============================================================================

class TestQueries:
    """Tests for the read side of RiskService."""

    @pytest.mark.asyncio
    async def test_get_score_of_unscored_deal_is_none(self, risk_service):
        assert await risk_service.get_score("deal_1", "team_1") is None

    @pytest.mark.asyncio
    async def test_get_scores_omits_unscored_and_duplicates(self, risk_service, deal_client):
        deal_client.add(clean_history("deal_a"))
        await risk_service.calculate_risk_score("deal_a", "team_1", as_of=AS_OF)

        scores = await risk_service.get_scores("team_1", ["deal_a", "deal_a", "deal_z"])

        assert [s.deal_id for s in scores] == ["deal_a"]
        assert await risk_service.get_scores("team_1", []) == []

    @pytest.mark.asyncio
    async def test_scores_are_scoped_to_team(self, risk_service, deal_client):
        deal_client.add(clean_history("deal_a"))
        await risk_service.calculate_risk_score("deal_a", "team_1", as_of=AS_OF)

        assert await risk_service.get_score("deal_a", "team_2") is None
        assert await risk_service.get_scores("team_2", ["deal_a"]) == []

    @pytest.mark.asyncio
    async def test_distribution_counts_current_bands(self, risk_service, deal_client):
        deal_client.add(clean_history("deal_low"))
        deal_client.add(empty_history("deal_medium"))
        deal_client.add(bounced_history("deal_high"))
        await risk_service.recalculate_all("team_1", as_of=AS_OF)

        distribution = await risk_service.get_distribution("team_1")

        assert (distribution.low, distribution.medium, distribution.high) == (1, 1, 1)
        assert distribution.total == 3

    @pytest.mark.asyncio
    async def test_distribution_reflects_latest_score_only(self, risk_service, deal_client):
        deal_client.add(bounced_history())
        await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)
        deal_client.add(clean_history())
        await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)

        distribution = await risk_service.get_distribution("team_1")
        assert distribution.to_dict() == {"low": 1, "medium": 0, "high": 0, "total": 1}

    @pytest.mark.asyncio
    async def test_events_limit(self, risk_service, deal_client):
        deal_client.add(clean_history())
        for _ in range(3):
            await risk_service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)

        assert len(await risk_service.get_events("deal_1", "team_1", limit=2)) == 2
        assert len(await risk_service.get_events("deal_1", "team_1")) == 3

    @pytest.mark.asyncio
    async def test_events_limit_is_clamped(self, uow_factory, deal_client):
        service = RiskService(
            uow_factory=uow_factory,
            deal_client=deal_client,
            locks=DealLockRegistry(),
            scoring=ScoringSettings(),
            events_max_limit=2,
        )
        deal_client.add(clean_history())
        for _ in range(3):
            await service.calculate_risk_score("deal_1", "team_1", as_of=AS_OF)

        assert len(await service.get_events("deal_1", "team_1", limit=100)) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1])
    async def test_non_positive_limit_is_rejected(self, risk_service, limit):
        with pytest.raises(ValidationException) as exc_info:
            await risk_service.get_events("deal_1", "team_1", limit=limit)
        assert exc_info.value.field == "limit"
        assert not isinstance(exc_info.value, RiskConfigValidationException)
