"""Data Transfer Objects for application layer."""

from .risk import (
    FailedDeal,
    RecalculationResult,
    RiskConfigInput,
    SaveConfigResult,
)

__all__ = [
    "FailedDeal",
    "RecalculationResult",
    "RiskConfigInput",
    "SaveConfigResult",
]
