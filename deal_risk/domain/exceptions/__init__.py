"""Domain Exceptions - Business rule violations and domain errors."""

from .base import DomainException, ValidationException
from .config import (
    RiskConfigurationException,
    RiskConfigValidationException,
    RiskConfigVersionConflictException,
)
from .deal import (
    DealDataAccessException,
    DealDataTimeoutException,
    DealNotFoundException,
)

__all__ = [
    "DomainException",
    "ValidationException",
    "RiskConfigurationException",
    "RiskConfigValidationException",
    "RiskConfigVersionConflictException",
    "DealDataAccessException",
    "DealDataTimeoutException",
    "DealNotFoundException",
]
