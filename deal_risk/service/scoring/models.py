"""
Data models for risk scoring.

These models represent the data structures passed between the pipeline
stages, from classified payments to the final scoring result.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple

from deal_risk.domain.entities import RiskBand, RiskFactor


class PaymentClass(str, Enum):
    """Classification of a single payment."""
    ON_TIME = "on_time"
    OVERPAYMENT = "overpayment"
    PARTIAL = "partial"
    RECOVERY = "recovery"  # First cleared payment after one or more misses
    MISSED = "missed"
    NSF = "nsf"

    @property
    def is_miss(self) -> bool:
        return self in (PaymentClass.MISSED, PaymentClass.NSF)


@dataclass(frozen=True)
class ClassifiedPayment:
    """
    A payment with its classification.

    Attributes:
        payment_id: Identifier of the source payment
        payment_date: Date of the payment
        kind: The classification
        amount_cents: Amount collected
        expected_cents: Expected daily payment of the deal (0 if unknown)
    """
    payment_id: str
    payment_date: date
    kind: PaymentClass
    amount_cents: int
    expected_cents: int


@dataclass(frozen=True)
class EvidenceEvent:
    """
    One dated observation contributing to a factor.

    magnitude is 0-100, higher meaning riskier.
    """
    occurred_on: date
    magnitude: float
    kind: str = ""


@dataclass(frozen=True)
class FactorResult:
    """
    Output of a factor evaluator.

    ``subscore`` is the plain (undecayed) mean of the evidence
    magnitudes, or None when the factor found no evidence at all.
    """
    factor: RiskFactor
    evidence: Tuple[EvidenceEvent, ...] = field(default_factory=tuple)

    @property
    def has_evidence(self) -> bool:
        return len(self.evidence) > 0

    @property
    def subscore(self) -> Optional[float]:
        if not self.evidence:
            return None
        return sum(e.magnitude for e in self.evidence) / len(self.evidence)


@dataclass(frozen=True)
class ScoringResult:
    """
    Complete result of scoring one deal.

    Attributes:
        score: Composite risk score from 0-100 (higher = riskier)
        band: Band for the score under the config's thresholds
        factor_breakdown: Decayed sub-score per factor, None without evidence
        config_version: Version of the config used
    """
    score: int
    band: RiskBand
    factor_breakdown: Dict[str, Optional[float]]
    config_version: int
