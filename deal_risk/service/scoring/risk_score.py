"""
Score Composition for the Deal Risk Engine.

This module combines the decayed factor sub-scores into the composite
0-100 risk score and maps it onto a risk band.
"""

import math
from typing import Mapping, Optional

from deal_risk.domain.entities import (
    BandThresholds,
    FactorWeights,
    RiskBand,
    RiskFactor,
)
from deal_risk.domain.exceptions import RiskConfigurationException


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def compose_score(
    factor_scores: Mapping[RiskFactor, Optional[float]],
    weights: FactorWeights,
    baseline_score: int,
) -> int:
    """
    Calculate the composite risk score from decayed factor sub-scores.

    Factors without evidence (None) are left out of both the numerator
    and the denominator, so the remaining weights are renormalized
    instead of an absent factor pulling the score toward baseline.

    Args:
        factor_scores: Decayed sub-score per factor, None without evidence
        weights: Factor weights of the active config
        baseline_score: Score returned when no weighted factor has evidence

    Returns:
        Composite risk score from 0-100 (higher = riskier)

    Raises:
        RiskConfigurationException: If the configured weights sum to zero
    """
    if weights.total <= 0:
        raise RiskConfigurationException("Factor weights sum to zero")

    weighted_sum = 0.0
    weight_sum = 0.0
    for factor in RiskFactor:
        subscore = factor_scores.get(factor)
        if subscore is None:
            continue
        weight = weights.get(factor)
        weighted_sum += weight * subscore
        weight_sum += weight

    if weight_sum == 0.0:
        return baseline_score

    return max(0, min(100, round_half_up(weighted_sum / weight_sum)))


def classify_band(score: int, thresholds: BandThresholds) -> RiskBand:
    """
    Map a score to its risk band.

    Both bounds are inclusive: score <= low_max is low, score >= high_min
    is high, anything in between is medium.
    """
    if score <= thresholds.low_max:
        return RiskBand.LOW
    if score >= thresholds.high_min:
        return RiskBand.HIGH
    return RiskBand.MEDIUM
