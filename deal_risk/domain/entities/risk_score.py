"""Current risk score of a deal."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from deal_risk.core.clock import utcnow


class RiskBand(str, Enum):
    """Discretized risk classification of a numeric score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class RiskScore:
    """
    The current (overwritable) risk score of a single deal.

    ``factor_breakdown`` maps each factor to its decayed sub-score, or
    None when the factor had no evidence for this deal.
    """

    deal_id: str
    team_id: str
    score: int
    band: RiskBand
    config_version: int
    factor_breakdown: Dict[str, Optional[float]] = field(default_factory=dict)
    previous_score: Optional[int] = None
    computed_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "deal_id": self.deal_id,
            "team_id": self.team_id,
            "score": self.score,
            "band": self.band.value,
            "previous_score": self.previous_score,
            "factor_breakdown": dict(self.factor_breakdown),
            "config_version": self.config_version,
            "computed_at": self.computed_at.isoformat() + "Z",
        }


@dataclass(frozen=True)
class RiskDistribution:
    """Snapshot count of a team's deals per band."""

    low: int = 0
    medium: int = 0
    high: int = 0

    @property
    def total(self) -> int:
        return self.low + self.medium + self.high

    def to_dict(self) -> dict:
        return {
            "low": self.low,
            "medium": self.medium,
            "high": self.high,
            "total": self.total,
        }
