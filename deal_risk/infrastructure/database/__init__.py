"""Database infrastructure."""

from .connection import DatabaseSessionManager, db_manager
from .models import Base, RiskConfigModel, RiskEventModel, RiskScoreModel

__all__ = [
    "DatabaseSessionManager",
    "db_manager",
    "Base",
    "RiskConfigModel",
    "RiskEventModel",
    "RiskScoreModel",
]
