"""
Risk Scoring Module for the Deal Risk Engine
"""

from .models import (
    ClassifiedPayment,
    EvidenceEvent,
    FactorResult,
    PaymentClass,
    ScoringResult,
)
from .settings import ScoringSettings, scoring_settings
from .classification import classify_payments
from .risk_factors import (
    evaluate_amounts,
    evaluate_consistency,
    evaluate_nsf,
    evaluate_progress,
    evaluate_recovery,
    evaluate_velocity,
)
from .decay import decay_weight, decayed_subscore
from .risk_score import classify_band, compose_score, round_half_up
from .engine import evaluate_factors, score_deal

__all__ = [
    # Settings
    "ScoringSettings",
    "scoring_settings",
    # Models
    "ClassifiedPayment",
    "EvidenceEvent",
    "FactorResult",
    "PaymentClass",
    "ScoringResult",
    # Classification
    "classify_payments",
    # Risk Factors
    "evaluate_amounts",
    "evaluate_consistency",
    "evaluate_nsf",
    "evaluate_progress",
    "evaluate_recovery",
    "evaluate_velocity",
    # Decay
    "decay_weight",
    "decayed_subscore",
    # Scoring
    "classify_band",
    "compose_score",
    "round_half_up",
    # Engine
    "evaluate_factors",
    "score_deal",
]
