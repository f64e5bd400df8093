"""
Scoring Engine for the Deal Risk Engine.

This module runs the complete pure scoring pipeline for one deal:
1. Classify the payment history
2. Evaluate the six risk factors
3. Decay each factor's evidence toward the baseline
4. Compose the weighted composite score
5. Classify the score into a band

No I/O happens here: the same history, config and ``as_of`` date always
produce the same result.
"""

from datetime import date
from typing import Dict, Optional

from deal_risk.domain.entities import DealHistory, RiskConfig, RiskFactor

from .classification import classify_payments
from .decay import decayed_subscore
from .models import FactorResult, ScoringResult
from .risk_factors import (
    evaluate_amounts,
    evaluate_consistency,
    evaluate_nsf,
    evaluate_progress,
    evaluate_recovery,
    evaluate_velocity,
)
from .risk_score import classify_band, compose_score
from .settings import ScoringSettings, scoring_settings


def evaluate_factors(
    history: DealHistory,
    as_of: date,
    settings: ScoringSettings = scoring_settings,
) -> Dict[RiskFactor, FactorResult]:
    """Run every factor evaluator over a deal's history."""
    payments = classify_payments(history, settings)
    deal = history.deal
    results = (
        evaluate_consistency(payments, settings),
        evaluate_nsf(payments),
        evaluate_velocity(deal, as_of, settings),
        evaluate_recovery(payments),
        evaluate_progress(deal, as_of),
        evaluate_amounts(payments, settings),
    )
    return {result.factor: result for result in results}


def score_deal(
    history: DealHistory,
    config: RiskConfig,
    as_of: date,
    settings: ScoringSettings = scoring_settings,
) -> ScoringResult:
    """
    Score a single deal under a config snapshot.

    Args:
        history: The deal and its payments
        config: The (resolved) risk configuration to apply
        as_of: Reference date for decay and snapshot factors
        settings: Scoring settings (uses defaults if not provided)

    Returns:
        ScoringResult with score, band and per-factor breakdown

    Raises:
        RiskConfigurationException: If the config's weights sum to zero
    """
    factors = evaluate_factors(history, as_of, settings)

    decayed: Dict[RiskFactor, Optional[float]] = {}
    for factor in RiskFactor:
        result = factors[factor]
        if not result.has_evidence:
            decayed[factor] = None
            continue
        decayed[factor] = decayed_subscore(
            result.evidence,
            as_of,
            config.decay_half_life_days,
            config.baseline_score,
        )

    score = compose_score(decayed, config.weights, config.baseline_score)
    band = classify_band(score, config.band_thresholds)

    return ScoringResult(
        score=score,
        band=band,
        factor_breakdown={
            factor.value: None if value is None else round(value, 2)
            for factor, value in decayed.items()
        },
        config_version=config.version,
    )
