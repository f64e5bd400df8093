"""Pydantic schemas for API request/response validation."""

from .config import (
    BandThresholdsSchema,
    FailedDealSchema,
    PresetSchema,
    RiskConfigResponseSchema,
    SaveConfigRequestSchema,
    SaveConfigResponseSchema,
)
from .score import (
    RecalculateAllRequestSchema,
    RecalculateRequestSchema,
    RecalculationResponseSchema,
    RiskDistributionSchema,
    RiskEventSchema,
    RiskEventsResponseSchema,
    RiskScoreSchema,
    ScoresQueryRequestSchema,
    ScoresQueryResponseSchema,
)
from .error import ErrorResponseSchema

__all__ = [
    "BandThresholdsSchema",
    "FailedDealSchema",
    "PresetSchema",
    "RiskConfigResponseSchema",
    "SaveConfigRequestSchema",
    "SaveConfigResponseSchema",
    "RecalculateAllRequestSchema",
    "RecalculateRequestSchema",
    "RecalculationResponseSchema",
    "RiskDistributionSchema",
    "RiskEventSchema",
    "RiskEventsResponseSchema",
    "RiskScoreSchema",
    "ScoresQueryRequestSchema",
    "ScoresQueryResponseSchema",
    "ErrorResponseSchema",
]
