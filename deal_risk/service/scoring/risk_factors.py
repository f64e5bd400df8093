"""
Risk Factor Evaluators for the Deal Risk Engine.

This module turns a deal's history into evidence for the six factors:
- Payment Consistency
- NSF Severity
- Payment Velocity
- Recovery Behavior
- Deal Progress
- Amount Accuracy

Every evaluator is a pure function. It returns a FactorResult holding
dated evidence events with magnitudes from 0 (no risk) to 100 (maximum
risk). A factor with nothing to observe returns no evidence at all, which
is different from a magnitude of zero: the composer drops such a factor
and redistributes its weight.
"""

from datetime import date
from typing import List, Sequence

from deal_risk.domain.entities import Deal, RiskFactor

from .models import ClassifiedPayment, EvidenceEvent, FactorResult, PaymentClass
from .settings import ScoringSettings, scoring_settings


# (minimum ratio, magnitude), checked in order
VELOCITY_TIERS = [
    (1.2, 0.0),   # Well ahead of schedule
    (1.0, 20.0),
    (0.8, 50.0),
    (0.6, 70.0),
]
VELOCITY_FLOOR = 90.0  # Far behind schedule

PROGRESS_TIERS = [
    (0.75, 0.0),
    (0.50, 20.0),
    (0.25, 40.0),
]
PROGRESS_FLOOR = 60.0

AMOUNT_TIERS = [
    (1.0, 0.0),
    (0.9, 20.0),
    (0.75, 50.0),
]
AMOUNT_FLOOR = 80.0

# Delinquency episode length -> magnitude once the merchant catches up
RECOVERY_TIERS = [
    (1, 10.0),
    (2, 30.0),
    (4, 50.0),
]
RECOVERY_SLOW = 70.0
UNRECOVERED = 90.0


def _tiered(value: float, tiers, floor: float) -> float:
    for threshold, magnitude in tiers:
        if value >= threshold:
            return magnitude
    return floor


def _recovery_magnitude(episode_length: int) -> float:
    for max_length, magnitude in RECOVERY_TIERS:
        if episode_length <= max_length:
            return magnitude
    return RECOVERY_SLOW


def evaluate_consistency(
    payments: Sequence[ClassifiedPayment],
    settings: ScoringSettings = scoring_settings,
) -> FactorResult:
    """
    Evaluate how reliably payments arrive as expected.

    One evidence event per classified payment:
        on_time / overpayment -> 0
        recovery              -> consistency_recovery_magnitude (40)
        partial               -> consistency_partial_magnitude (50)
        missed / nsf          -> 100

    Args:
        payments: Classified payments of the deal
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        FactorResult for the consistency factor
    """
    magnitudes = {
        PaymentClass.ON_TIME: 0.0,
        PaymentClass.OVERPAYMENT: 0.0,
        PaymentClass.RECOVERY: settings.consistency_recovery_magnitude,
        PaymentClass.PARTIAL: settings.consistency_partial_magnitude,
        PaymentClass.MISSED: 100.0,
        PaymentClass.NSF: 100.0,
    }
    evidence = tuple(
        EvidenceEvent(p.payment_date, magnitudes[p.kind], p.kind.value)
        for p in payments
    )
    return FactorResult(RiskFactor.CONSISTENCY, evidence)


def evaluate_nsf(payments: Sequence[ClassifiedPayment]) -> FactorResult:
    """
    Evaluate bounced/returned payments.

    Every classified payment is evidence: an NSF counts 100, anything
    else 0. After decay this reads as a recency-weighted NSF rate, so a
    fresh bounce on a long clean history still moves the factor while
    old bounces fade.
    """
    evidence = tuple(
        EvidenceEvent(
            p.payment_date,
            100.0 if p.kind == PaymentClass.NSF else 0.0,
            p.kind.value,
        )
        for p in payments
    )
    return FactorResult(RiskFactor.NSF, evidence)


def evaluate_velocity(
    deal: Deal,
    as_of: date,
    settings: ScoringSettings = scoring_settings,
) -> FactorResult:
    """
    Evaluate repayment pace against the expected linear schedule.

    Algorithm:
        1. expected progress = min(days since funding / term, 1)
        2. ratio = fraction of payback collected / expected progress
        3. Map the ratio through VELOCITY_TIERS

    Edge Cases:
        - Unfunded deal, deal funded less than min_days_funded ago, or a
          non-positive payback amount: no evidence

    The result is a single snapshot event dated ``as_of``.
    """
    if deal.funded_at is None or deal.payback_amount_cents <= 0:
        return FactorResult(RiskFactor.VELOCITY)

    days_since_funding = (as_of - deal.funded_at).days
    if days_since_funding < settings.min_days_funded:
        return FactorResult(RiskFactor.VELOCITY)

    term_days = deal.term_days or settings.default_term_days
    expected_progress = min(days_since_funding / term_days, 1.0)
    ratio = deal.percent_paid / expected_progress

    magnitude = _tiered(ratio, VELOCITY_TIERS, VELOCITY_FLOOR)
    return FactorResult(
        RiskFactor.VELOCITY,
        (EvidenceEvent(as_of, magnitude, "velocity_snapshot"),),
    )


def evaluate_recovery(payments: Sequence[ClassifiedPayment]) -> FactorResult:
    """
    Evaluate how the merchant behaves after falling behind.

    Consecutive missed/NSF payments form a delinquency episode. Each
    episode becomes one evidence event:
        - closed by a recovery payment: dated at the recovery, magnitude
          by episode length (1 -> 10, 2 -> 30, 3-4 -> 50, 5+ -> 70)
        - still open: dated at the last miss, magnitude 90

    A deal that never missed has no recovery evidence.
    """
    evidence: List[EvidenceEvent] = []
    episode_length = 0
    last_miss_on = None

    for payment in payments:
        if payment.kind.is_miss:
            episode_length += 1
            last_miss_on = payment.payment_date
            continue

        if episode_length > 0:
            evidence.append(
                EvidenceEvent(
                    payment.payment_date,
                    _recovery_magnitude(episode_length),
                    "recovered",
                )
            )
            episode_length = 0

    if episode_length > 0:
        evidence.append(EvidenceEvent(last_miss_on, UNRECOVERED, "unrecovered"))

    return FactorResult(RiskFactor.RECOVERY, tuple(evidence))


def evaluate_progress(deal: Deal, as_of: date) -> FactorResult:
    """
    Evaluate how far the deal is toward completion.

    More of the payback collected means less exposure left. Maps the
    fraction paid through PROGRESS_TIERS as a snapshot dated ``as_of``.
    Unfunded deals and deals without a payback amount have no evidence.
    """
    if deal.funded_at is None or deal.payback_amount_cents <= 0:
        return FactorResult(RiskFactor.PROGRESS)

    magnitude = _tiered(deal.percent_paid, PROGRESS_TIERS, PROGRESS_FLOOR)
    return FactorResult(
        RiskFactor.PROGRESS,
        (EvidenceEvent(as_of, magnitude, "progress_snapshot"),),
    )


def evaluate_amounts(
    payments: Sequence[ClassifiedPayment],
    settings: ScoringSettings = scoring_settings,
) -> FactorResult:
    """
    Evaluate whether cleared payment amounts match the expected amount.

    Each cleared payment with a known expected amount yields
    accuracy = min(amount / expected, max_payment_accuracy), mapped
    through AMOUNT_TIERS. Misses are ignored here; they are covered by
    the consistency and NSF factors.
    """
    evidence = []
    for payment in payments:
        if payment.kind.is_miss or payment.expected_cents <= 0:
            continue
        accuracy = min(
            payment.amount_cents / payment.expected_cents,
            settings.max_payment_accuracy,
        )
        evidence.append(
            EvidenceEvent(
                payment.payment_date,
                _tiered(accuracy, AMOUNT_TIERS, AMOUNT_FLOOR),
                payment.kind.value,
            )
        )
    return FactorResult(RiskFactor.AMOUNTS, tuple(evidence))
