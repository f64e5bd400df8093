"""
Domain Interfaces (Ports)
"""

from .repositories import (
    RiskConfigRepository,
    RiskEventRepository,
    RiskScoreRepository,
)
from .clients import DealDataClient
from .unit_of_work import RiskUnitOfWork

__all__ = [
    "RiskConfigRepository",
    "RiskEventRepository",
    "RiskScoreRepository",
    "DealDataClient",
    "RiskUnitOfWork",
]
