"""Domain Entities - Core business objects."""

from .deal import Deal, DealHistory, Payment, PaymentStatus
from .risk_config import (
    DEFAULT_PRESET,
    PRESETS,
    BandThresholds,
    FactorWeights,
    PresetDefinition,
    RiskConfig,
    RiskFactor,
    RiskPreset,
    list_presets,
    preset_config,
    resolve_preset,
)
from .risk_event import RiskEvent, RiskTrigger
from .risk_score import RiskBand, RiskDistribution, RiskScore

__all__ = [
    "Deal",
    "DealHistory",
    "Payment",
    "PaymentStatus",
    "DEFAULT_PRESET",
    "PRESETS",
    "BandThresholds",
    "FactorWeights",
    "PresetDefinition",
    "RiskConfig",
    "RiskFactor",
    "RiskPreset",
    "list_presets",
    "preset_config",
    "resolve_preset",
    "RiskEvent",
    "RiskTrigger",
    "RiskBand",
    "RiskDistribution",
    "RiskScore",
]
