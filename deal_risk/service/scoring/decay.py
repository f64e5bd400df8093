"""
Time-Decay for the Deal Risk Engine.

Evidence is weighted by its age so recent behaviour dominates:

    w_i     = 2 ^ (-age_days_i / half_life_days)
    decayed = baseline + sum(w_i * (m_i - baseline)) / sum(w_i)

The result is a weighted mean of the magnitudes and therefore always lies
between the smallest and largest of baseline and the magnitudes.
"""

from datetime import date
from typing import Sequence

from .models import EvidenceEvent


def decay_weight(age_days: float, half_life_days: float) -> float:
    """
    Weight of a piece of evidence that is ``age_days`` old.

    Evidence dated in the future counts as age 0.

    Raises:
        ValueError: If half_life_days is not positive
    """
    if half_life_days <= 0:
        raise ValueError(f"half_life_days must be positive, got {half_life_days}")
    return 2.0 ** (-max(0.0, age_days) / half_life_days)


def age_in_days(occurred_on: date, as_of: date) -> int:
    return max(0, (as_of - occurred_on).days)


def decayed_subscore(
    evidence: Sequence[EvidenceEvent],
    as_of: date,
    half_life_days: float,
    baseline: float,
) -> float:
    """
    Combine a factor's evidence into one decayed sub-score.

    Args:
        evidence: Dated evidence events with 0-100 magnitudes
        as_of: The reference date ages are measured from
        half_life_days: Days after which an event's weight halves
        baseline: Score a factor reverts to without evidence

    Returns:
        Decayed sub-score clamped to 0-100; ``baseline`` when there is
        no evidence or every weight has underflowed to zero
    """
    if not evidence:
        return float(baseline)

    weighted_deviation = 0.0
    total_weight = 0.0
    for event in evidence:
        weight = decay_weight(age_in_days(event.occurred_on, as_of), half_life_days)
        weighted_deviation += weight * (event.magnitude - baseline)
        total_weight += weight

    if total_weight == 0.0:
        return float(baseline)

    decayed = baseline + weighted_deviation / total_weight
    return max(0.0, min(100.0, decayed))
