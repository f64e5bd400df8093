"""Risk configuration Pydantic schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BandThresholdsSchema(BaseModel):
    """Inclusive band boundaries."""

    low_max: int = Field(..., description="Scores at or below this are low risk", examples=[33])
    high_min: int = Field(..., description="Scores at or above this are high risk", examples=[67])


class RiskConfigResponseSchema(BaseModel):
    """Schema for a team's active risk configuration."""

    team_id: str
    version: int = Field(..., ge=1, description="Config version; every save increments it")
    preset: str = Field(..., examples=["balanced"])
    weights: Dict[str, float] = Field(
        ...,
        description="Weight of each factor (0-1)",
        examples=[{
            "consistency": 0.25, "nsf": 0.25, "velocity": 0.15,
            "recovery": 0.15, "progress": 0.10, "amounts": 0.10,
        }],
    )
    decay_half_life_days: int = Field(..., description="Days after which evidence weight halves")
    baseline_score: int = Field(..., ge=0, le=100, description="Score without evidence")
    band_thresholds: BandThresholdsSchema
    created_at: str


class SaveConfigRequestSchema(BaseModel):
    """
    Schema for PUT /v1/risk/config request body.

    Either a preset key alone, or preset "custom" with every parameter.
    Ranges and consistency are checked by the service so all violations
    are reported together.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"team_id": "team_1", "preset": "conservative"},
                {
                    "team_id": "team_1",
                    "preset": "custom",
                    "weights": {
                        "consistency": 0.3, "nsf": 0.3, "velocity": 0.1,
                        "recovery": 0.1, "progress": 0.1, "amounts": 0.1,
                    },
                    "decay_half_life_days": 45,
                    "baseline_score": 55,
                    "band_thresholds": {"low_max": 30, "high_min": 70},
                },
            ]
        }
    )

    team_id: str = Field(..., min_length=1, max_length=255)
    preset: str = Field(..., examples=["balanced"])
    weights: Optional[Dict[str, float]] = None
    decay_half_life_days: Optional[int] = None
    baseline_score: Optional[int] = None
    band_thresholds: Optional[Dict[str, int]] = None

    @field_validator("team_id")
    @classmethod
    def validate_team_id(cls, v: str) -> str:
        """Ensure team_id is not just whitespace."""
        if not v.strip():
            raise ValueError("team_id cannot be empty or whitespace")
        return v.strip()


class FailedDealSchema(BaseModel):
    """A deal whose recompute failed."""

    deal_id: str
    reason: str = Field(..., examples=["DATA_ACCESS_TIMEOUT: Deal data request timed out"])


class SaveConfigResponseSchema(BaseModel):
    """Schema for PUT /v1/risk/config response body."""

    saved: bool
    config: RiskConfigResponseSchema
    recalculated: int = Field(..., ge=0, description="Deals recomputed under the new version")
    failed: List[FailedDealSchema]


class PresetSchema(BaseModel):
    """A named preset and its canonical parameters."""

    key: str
    description: str
    weights: Dict[str, float]
    decay_half_life_days: int
    baseline_score: int
    band_thresholds: BandThresholdsSchema
