"""
Unit Tests for payment classification and the six risk factor evaluators.

Test Categories:
- TestClassifyPayments: per-payment labels
- TestConsistency / TestNsf: per-payment evidence
- TestVelocity / TestProgress: deal-level snapshots
- TestRecovery: delinquency episodes
- TestAmounts: amount accuracy
- TestFactorResult: undecayed sub-scores
"""

from datetime import timedelta

import pytest

from deal_risk.domain.entities import DealHistory, Payment, PaymentStatus, RiskFactor
from deal_risk.service.scoring import (
    EvidenceEvent,
    FactorResult,
    PaymentClass,
    ScoringSettings,
    classify_payments,
    evaluate_amounts,
    evaluate_consistency,
    evaluate_nsf,
    evaluate_progress,
    evaluate_recovery,
    evaluate_velocity,
)

from tests.helpers import AS_OF, make_deal, payment, statuses_to_payments


C = PaymentStatus.COMPLETED
M = PaymentStatus.MISSED
R = PaymentStatus.RETURNED


def classify(payments, deal=None, settings=None):
    history = DealHistory(deal=deal or make_deal(), payments=tuple(payments))
    return classify_payments(history, settings or ScoringSettings())


def kinds(classified):
    return [p.kind for p in classified]


# =============================================================================
# Classification
# =============================================================================

class TestClassifyPayments:
    """Tests for classify_payments()."""

    def test_amount_within_tolerance_is_on_time(self):
        result = classify([payment(2, 10_000), payment(1, 9_100), payment(0, 10_900)])
        assert kinds(result) == [PaymentClass.ON_TIME] * 3

    def test_underpayment_is_partial(self):
        result = classify([payment(0, 8_000)])
        assert kinds(result) == [PaymentClass.PARTIAL]

    def test_overpayment(self):
        result = classify([payment(0, 11_500)])
        assert kinds(result) == [PaymentClass.OVERPAYMENT]

    def test_returned_payment_is_nsf(self):
        result = classify([payment(0, status=R)])
        assert kinds(result) == [PaymentClass.NSF]

    def test_nsf_date_marks_completed_payment_as_nsf(self):
        p = payment(3)
        flagged = Payment(
            payment_id=p.payment_id,
            amount_cents=p.amount_cents,
            payment_date=p.payment_date,
            status=C,
            nsf_at=p.payment_date + timedelta(days=2),
        )
        assert kinds(classify([flagged])) == [PaymentClass.NSF]

    def test_failed_payment_is_missed(self):
        result = classify([payment(0, status=PaymentStatus.FAILED)])
        assert kinds(result) == [PaymentClass.MISSED]

    def test_first_cleared_payment_after_misses_is_recovery(self):
        result = classify(statuses_to_payments([C, M, M, C, C]))
        assert kinds(result) == [
            PaymentClass.ON_TIME,
            PaymentClass.MISSED,
            PaymentClass.MISSED,
            PaymentClass.RECOVERY,
            PaymentClass.ON_TIME,
        ]

    def test_pending_payments_are_skipped(self):
        result = classify(statuses_to_payments([M, PaymentStatus.PENDING, C]))
        assert kinds(result) == [PaymentClass.MISSED, PaymentClass.RECOVERY]

    def test_payments_are_sorted_chronologically(self):
        result = classify([payment(0), payment(5, status=M), payment(3)])
        assert [p.payment_date for p in result] == sorted(p.payment_date for p in result)
        assert kinds(result) == [PaymentClass.MISSED, PaymentClass.RECOVERY, PaymentClass.ON_TIME]

    def test_without_expected_amount_everything_cleared_is_on_time(self):
        deal = make_deal(daily_payment_cents=0)
        result = classify([payment(1, 1), payment(0, 1_000_000)], deal=deal)
        assert kinds(result) == [PaymentClass.ON_TIME, PaymentClass.ON_TIME]

    def test_tolerance_is_configurable(self):
        result = classify([payment(0, 9_100)], settings=ScoringSettings(payment_tolerance=0.05))
        assert kinds(result) == [PaymentClass.PARTIAL]


# =============================================================================
# Consistency & NSF
# =============================================================================

class TestConsistency:
    """Tests for evaluate_consistency()."""

    def test_magnitudes_per_class(self):
        classified = classify([
            payment(5, 10_000),
            payment(4, 8_000),
            payment(3, status=M),
            payment(2, status=R),
            payment(1, 10_000),
            payment(0, 12_000),
        ])
        result = evaluate_consistency(classified, ScoringSettings())

        assert result.factor == RiskFactor.CONSISTENCY
        assert [e.magnitude for e in result.evidence] == [0.0, 50.0, 100.0, 100.0, 40.0, 0.0]
        assert result.subscore == pytest.approx(290 / 6)

    def test_no_payments_means_no_evidence(self):
        result = evaluate_consistency((), ScoringSettings())
        assert not result.has_evidence
        assert result.subscore is None


class TestNsf:
    """Tests for evaluate_nsf()."""

    def test_only_nsf_payments_carry_magnitude(self):
        classified = classify(statuses_to_payments([C, R, C, M]))
        result = evaluate_nsf(classified)

        assert [e.magnitude for e in result.evidence] == [0.0, 100.0, 0.0, 0.0]
        assert result.subscore == 25.0

    def test_clean_history_scores_zero_with_evidence(self):
        result = evaluate_nsf(classify(statuses_to_payments([C] * 10)))
        assert result.has_evidence
        assert result.subscore == 0.0


# =============================================================================
# Velocity & Progress
# =============================================================================

class TestVelocity:
    """Tests for evaluate_velocity()."""

    @pytest.mark.parametrize(
        "total_paid_cents,expected_magnitude",
        [
            (840_000, 0.0),   # ratio 1.4
            (600_000, 20.0),  # ratio 1.0
            (540_000, 50.0),  # ratio 0.9
            (420_000, 70.0),  # ratio 0.7
            (300_000, 90.0),  # ratio 0.5
            (0, 90.0),
        ],
    )
    def test_ratio_tiers(self, total_paid_cents, expected_magnitude):
        # Funded 60 of 120 days ago: half the payback is expected
        deal = make_deal(total_paid_cents=total_paid_cents)
        result = evaluate_velocity(deal, AS_OF, ScoringSettings())

        assert result.evidence[0].magnitude == expected_magnitude
        assert result.evidence[0].occurred_on == AS_OF

    def test_expected_progress_is_capped_after_term(self):
        deal = make_deal(total_paid_cents=1_200_000, funded_days_ago=400)
        result = evaluate_velocity(deal, AS_OF, ScoringSettings())
        assert result.evidence[0].magnitude == 20.0

    def test_default_term_used_when_deal_has_none(self):
        # 90 days into the default 180-day term, 50% paid -> on schedule
        deal = make_deal(total_paid_cents=600_000, funded_days_ago=90, term_days=None)
        result = evaluate_velocity(deal, AS_OF, ScoringSettings())
        assert result.evidence[0].magnitude == 20.0

    def test_unfunded_deal_has_no_evidence(self):
        deal = make_deal(funded_days_ago=None)
        assert not evaluate_velocity(deal, AS_OF, ScoringSettings()).has_evidence

    def test_deal_funded_today_has_no_evidence(self):
        deal = make_deal(funded_days_ago=0)
        assert not evaluate_velocity(deal, AS_OF, ScoringSettings()).has_evidence

    def test_zero_payback_has_no_evidence(self):
        deal = make_deal(payback_amount_cents=0)
        assert not evaluate_velocity(deal, AS_OF, ScoringSettings()).has_evidence


class TestProgress:
    """Tests for evaluate_progress()."""

    @pytest.mark.parametrize(
        "total_paid_cents,expected_magnitude",
        [
            (1_200_000, 0.0),
            (900_000, 0.0),
            (720_000, 20.0),
            (360_000, 40.0),
            (120_000, 60.0),
        ],
    )
    def test_percent_paid_tiers(self, total_paid_cents, expected_magnitude):
        deal = make_deal(total_paid_cents=total_paid_cents)
        result = evaluate_progress(deal, AS_OF)
        assert result.evidence[0].magnitude == expected_magnitude

    def test_zero_payback_has_no_evidence(self):
        assert not evaluate_progress(make_deal(payback_amount_cents=0), AS_OF).has_evidence

    def test_unfunded_deal_has_no_evidence(self):
        assert not evaluate_progress(make_deal(funded_days_ago=None), AS_OF).has_evidence


# =============================================================================
# Recovery
# =============================================================================

class TestRecovery:
    """Tests for evaluate_recovery()."""

    def test_never_missed_has_no_evidence(self):
        result = evaluate_recovery(classify(statuses_to_payments([C] * 5)))
        assert not result.has_evidence
        assert result.subscore is None

    @pytest.mark.parametrize(
        "misses,expected_magnitude",
        [(1, 10.0), (2, 30.0), (3, 50.0), (4, 50.0), (5, 70.0), (8, 70.0)],
    )
    def test_closed_episode_magnitude_by_length(self, misses, expected_magnitude):
        classified = classify(statuses_to_payments([C] + [M] * misses + [C]))
        result = evaluate_recovery(classified)

        assert len(result.evidence) == 1
        assert result.evidence[0].magnitude == expected_magnitude
        # Dated at the recovery payment, which is the latest one
        assert result.evidence[0].occurred_on == AS_OF

    def test_open_episode_is_unrecovered(self):
        classified = classify(statuses_to_payments([C, C, M, R]))
        result = evaluate_recovery(classified)

        assert [e.magnitude for e in result.evidence] == [90.0]
        assert result.evidence[0].occurred_on == AS_OF

    def test_one_event_per_episode(self):
        classified = classify(statuses_to_payments([M, C, C, M, M, C, M]))
        result = evaluate_recovery(classified)
        assert [e.magnitude for e in result.evidence] == [10.0, 30.0, 90.0]
        assert result.subscore == pytest.approx(130 / 3)


# =============================================================================
# Amounts
# =============================================================================

class TestAmounts:
    """Tests for evaluate_amounts()."""

    def test_accuracy_tiers(self):
        classified = classify([
            payment(4, 10_000),
            payment(3, 9_500),
            payment(2, 8_000),
            payment(1, 5_000),
            payment(0, 20_000),
        ])
        result = evaluate_amounts(classified, ScoringSettings())
        assert [e.magnitude for e in result.evidence] == [0.0, 20.0, 50.0, 80.0, 0.0]

    def test_misses_are_ignored(self):
        classified = classify(statuses_to_payments([C, M, R]))
        result = evaluate_amounts(classified, ScoringSettings())
        assert len(result.evidence) == 1

    def test_no_expected_amount_means_no_evidence(self):
        classified = classify(statuses_to_payments([C, C]), deal=make_deal(daily_payment_cents=0))
        assert not evaluate_amounts(classified, ScoringSettings()).has_evidence


# =============================================================================
# Factor Results
# =============================================================================

class TestFactorResult:
    """Tests for FactorResult.subscore, the undecayed mean of the evidence."""

    def test_subscore_ignores_dates(self):
        result = FactorResult(
            RiskFactor.AMOUNTS,
            (
                EvidenceEvent(AS_OF - timedelta(days=300), 100.0),
                EvidenceEvent(AS_OF, 0.0),
                EvidenceEvent(AS_OF, 20.0),
            ),
        )
        assert result.subscore == pytest.approx(40.0)

    def test_no_evidence_has_no_subscore(self):
        result = FactorResult(RiskFactor.VELOCITY)
        assert not result.has_evidence
        assert result.subscore is None

    def test_snapshot_subscore_is_its_magnitude(self):
        result = evaluate_progress(make_deal(total_paid_cents=360_000), AS_OF)
        assert result.subscore == 40.0
