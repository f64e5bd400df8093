"""Risk score, event and recalculation Pydantic schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from deal_risk.domain.entities import RiskTrigger

from .config import FailedDealSchema


class RiskScoreSchema(BaseModel):
    """Current risk score of a deal."""

    deal_id: str
    team_id: str
    score: int = Field(..., ge=0, le=100, description="Composite risk score (higher is riskier)")
    band: str = Field(..., examples=["medium"])
    previous_score: Optional[int] = None
    factor_breakdown: Dict[str, Optional[float]] = Field(
        ...,
        description="Decayed sub-score per factor; null when the factor had no evidence",
    )
    config_version: int
    computed_at: str


class ScoresQueryRequestSchema(BaseModel):
    """Schema for POST /v1/risk/scores/query request body."""

    team_id: str = Field(..., min_length=1, max_length=255)
    deal_ids: List[str] = Field(..., max_length=1000)


class ScoresQueryResponseSchema(BaseModel):
    """Scores of the requested deals; unscored deals are omitted."""

    scores: List[RiskScoreSchema]


class RiskDistributionSchema(BaseModel):
    """Count of a team's scored deals per band."""

    low: int = Field(..., ge=0)
    medium: int = Field(..., ge=0)
    high: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class RiskEventSchema(BaseModel):
    """One audit record of a recompute."""

    event_id: str
    deal_id: str
    team_id: str
    previous_score: Optional[int] = None
    new_score: int
    new_band: str
    factor_breakdown: Dict[str, Optional[float]]
    trigger: str
    config_version: int
    timestamp: str


class RiskEventsResponseSchema(BaseModel):
    """A deal's events, newest first."""

    deal_id: str
    events: List[RiskEventSchema]


class RecalculateRequestSchema(BaseModel):
    """Schema for POST /v1/risk/scores/{deal_id}/recalculate request body."""

    team_id: str = Field(..., min_length=1, max_length=255)
    trigger: RiskTrigger = RiskTrigger.MANUAL


class RecalculateAllRequestSchema(BaseModel):
    """Schema for POST /v1/risk/recalculate request body."""

    team_id: str = Field(..., min_length=1, max_length=255)
    trigger: RiskTrigger = RiskTrigger.SCHEDULED


class RecalculationResponseSchema(BaseModel):
    """Outcome of a bulk recalculation."""

    recalculated: int = Field(..., ge=0)
    failed: List[FailedDealSchema]
    config_version: int
