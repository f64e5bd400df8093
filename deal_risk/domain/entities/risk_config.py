"""Risk configuration entities and the preset catalog."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List
from uuid import UUID, uuid4

from deal_risk.core.clock import utcnow


class RiskFactor(str, Enum):
    """The six independently evaluated risk dimensions."""

    CONSISTENCY = "consistency"
    NSF = "nsf"
    VELOCITY = "velocity"
    RECOVERY = "recovery"
    PROGRESS = "progress"
    AMOUNTS = "amounts"


class RiskPreset(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    LENIENT = "lenient"
    AGGRESSIVE = "aggressive"
    CUSTOM = "custom"


DEFAULT_PRESET = RiskPreset.BALANCED


@dataclass(frozen=True)
class FactorWeights:
    """Relative weight of each factor in the composite score (each 0-1)."""

    consistency: float
    nsf: float
    velocity: float
    recovery: float
    progress: float
    amounts: float

    def get(self, factor: RiskFactor) -> float:
        return getattr(self, factor.value)

    @property
    def total(self) -> float:
        return sum(self.get(f) for f in RiskFactor)

    def to_dict(self) -> Dict[str, float]:
        return {f.value: self.get(f) for f in RiskFactor}

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "FactorWeights":
        return cls(**{f.value: float(data[f.value]) for f in RiskFactor})


@dataclass(frozen=True)
class BandThresholds:
    """Scores at or below low_max are low risk; at or above high_min are high."""

    low_max: int
    high_min: int

    def to_dict(self) -> Dict[str, int]:
        return {"low_max": self.low_max, "high_min": self.high_min}


@dataclass(frozen=True)
class RiskConfig:
    """
    One version of a team's risk configuration.

    Configs are never edited in place: saving produces a new version.
    A non-custom config always carries its preset's canonical values.
    """

    team_id: str
    preset: RiskPreset
    weights: FactorWeights
    decay_half_life_days: int
    baseline_score: int
    band_thresholds: BandThresholds
    version: int = 1
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_custom(self) -> bool:
        return self.preset == RiskPreset.CUSTOM

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "team_id": self.team_id,
            "version": self.version,
            "preset": self.preset.value,
            "weights": self.weights.to_dict(),
            "decay_half_life_days": self.decay_half_life_days,
            "baseline_score": self.baseline_score,
            "band_thresholds": self.band_thresholds.to_dict(),
            "created_at": self.created_at.isoformat() + "Z",
        }


@dataclass(frozen=True)
class PresetDefinition:
    """Canonical parameter set of a named preset."""

    key: RiskPreset
    description: str
    weights: FactorWeights
    decay_half_life_days: int
    baseline_score: int
    band_thresholds: BandThresholds

    def to_dict(self) -> dict:
        return {
            "key": self.key.value,
            "description": self.description,
            "weights": self.weights.to_dict(),
            "decay_half_life_days": self.decay_half_life_days,
            "baseline_score": self.baseline_score,
            "band_thresholds": self.band_thresholds.to_dict(),
        }


PRESETS: Dict[RiskPreset, PresetDefinition] = {
    RiskPreset.CONSERVATIVE: PresetDefinition(
        key=RiskPreset.CONSERVATIVE,
        description="Flags risk early, slow to forgive. Best for cautious operators.",
        weights=FactorWeights(
            consistency=0.25, nsf=0.30, velocity=0.15,
            recovery=0.15, progress=0.05, amounts=0.10,
        ),
        decay_half_life_days=30,
        baseline_score=70,
        band_thresholds=BandThresholds(low_max=25, high_min=60),
    ),
    RiskPreset.BALANCED: PresetDefinition(
        key=RiskPreset.BALANCED,
        description="Default settings. Matches most operators' intuition.",
        weights=FactorWeights(
            consistency=0.25, nsf=0.25, velocity=0.15,
            recovery=0.15, progress=0.10, amounts=0.10,
        ),
        decay_half_life_days=30,
        baseline_score=50,
        band_thresholds=BandThresholds(low_max=33, high_min=67),
    ),
    RiskPreset.LENIENT: PresetDefinition(
        key=RiskPreset.LENIENT,
        description="Patient approach, focuses on trends. Tolerates hiccups.",
        weights=FactorWeights(
            consistency=0.20, nsf=0.15, velocity=0.20,
            recovery=0.20, progress=0.15, amounts=0.10,
        ),
        decay_half_life_days=20,
        baseline_score=45,
        band_thresholds=BandThresholds(low_max=40, high_min=75),
    ),
    RiskPreset.AGGRESSIVE: PresetDefinition(
        key=RiskPreset.AGGRESSIVE,
        description="Growth-oriented. Recent behaviour dominates, old misses fade fast.",
        weights=FactorWeights(
            consistency=0.20, nsf=0.15, velocity=0.25,
            recovery=0.10, progress=0.20, amounts=0.10,
        ),
        decay_half_life_days=10,
        baseline_score=40,
        band_thresholds=BandThresholds(low_max=45, high_min=80),
    ),
}


def list_presets() -> List[dict]:
    """The fixed preset catalog, in display order."""
    return [definition.to_dict() for definition in PRESETS.values()]


def preset_config(team_id: str, preset: RiskPreset, version: int = 1) -> RiskConfig:
    """Build a config carrying a preset's canonical values."""
    definition = PRESETS[preset]
    return RiskConfig(
        team_id=team_id,
        preset=preset,
        weights=definition.weights,
        decay_half_life_days=definition.decay_half_life_days,
        baseline_score=definition.baseline_score,
        band_thresholds=definition.band_thresholds,
        version=version,
    )


def resolve_preset(config: RiskConfig) -> RiskConfig:
    """
    Replace a preset config's parameters with the catalog's canonical ones.

    Custom configs are returned unchanged.
    """
    if config.is_custom:
        return config
    definition = PRESETS[config.preset]
    return replace(
        config,
        weights=definition.weights,
        decay_half_life_days=definition.decay_half_life_days,
        baseline_score=definition.baseline_score,
        band_thresholds=definition.band_thresholds,
    )
