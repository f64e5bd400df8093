"""Application services (use cases)."""

from .config_loader import load_active_config
from .risk_config_service import RiskConfigService
from .risk_service import RiskService

__all__ = [
    "load_active_config",
    "RiskConfigService",
    "RiskService",
]
