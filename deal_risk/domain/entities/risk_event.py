"""Append-only audit record of a score transition."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional
from uuid import UUID, uuid4

from .risk_score import RiskBand


class RiskTrigger(str, Enum):
    """What caused a recomputation."""

    MANUAL = "manual"
    CONFIG_CHANGE = "config_change"
    SCHEDULED = "scheduled"
    TRANSACTION_EVENT = "transaction_event"


@dataclass(frozen=True)
class RiskEvent:
    """
    Immutable record of one recomputation of one deal.

    ``previous_score`` is None for the first score a deal ever receives.
    """

    deal_id: str
    team_id: str
    previous_score: Optional[int]
    new_score: int
    new_band: RiskBand
    factor_breakdown: Dict[str, Optional[float]]
    trigger: RiskTrigger
    config_version: int
    timestamp: datetime
    id: UUID = field(default_factory=uuid4)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "event_id": str(self.id),
            "deal_id": self.deal_id,
            "team_id": self.team_id,
            "previous_score": self.previous_score,
            "new_score": self.new_score,
            "new_band": self.new_band.value,
            "factor_breakdown": dict(self.factor_breakdown),
            "trigger": self.trigger.value,
            "config_version": self.config_version,
            "timestamp": self.timestamp.isoformat() + "Z",
        }
