"""Data transfer objects for risk configuration and recalculation."""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from deal_risk.domain.entities import (
    PRESETS,
    BandThresholds,
    FactorWeights,
    RiskConfig,
    RiskFactor,
    RiskPreset,
    preset_config,
)

MIN_HALF_LIFE_DAYS = 5
MAX_HALF_LIFE_DAYS = 120

FIELD_ERROR = Tuple[str, str]


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_int(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


@dataclass(frozen=True)
class RiskConfigInput:
    """
    Input for saving a team's risk configuration.

    A tagged variant: either just a preset key, or ``preset="custom"``
    with every parameter given. A preset input may repeat parameters only
    if they equal the preset's canonical values.
    """

    preset: str
    weights: Optional[Dict[str, float]] = None
    decay_half_life_days: Optional[int] = None
    baseline_score: Optional[int] = None
    band_thresholds: Optional[Dict[str, int]] = None

    @property
    def is_custom(self) -> bool:
        return self.preset == RiskPreset.CUSTOM.value

    def validate(self) -> List[FIELD_ERROR]:
        """
        Check the input for every violation at once.

        Returns:
            (field, message) pairs, empty when the input is valid
        """
        valid_presets = [p.value for p in RiskPreset]
        if self.preset not in valid_presets:
            return [("preset", f"preset must be one of {', '.join(valid_presets)}")]

        errors: List[FIELD_ERROR] = []

        if self.is_custom:
            for name in ("weights", "decay_half_life_days", "baseline_score", "band_thresholds"):
                if getattr(self, name) is None:
                    errors.append((name, f"{name} is required for a custom config"))

        if self.weights is not None:
            errors.extend(self._validate_weights(self.weights))

        if self.decay_half_life_days is not None:
            value = self.decay_half_life_days
            if not _is_int(value) or not MIN_HALF_LIFE_DAYS <= value <= MAX_HALF_LIFE_DAYS:
                errors.append((
                    "decay_half_life_days",
                    f"decay_half_life_days must be an integer between "
                    f"{MIN_HALF_LIFE_DAYS} and {MAX_HALF_LIFE_DAYS}",
                ))

        if self.baseline_score is not None:
            value = self.baseline_score
            if not _is_int(value) or not 0 <= value <= 100:
                errors.append(("baseline_score", "baseline_score must be an integer between 0 and 100"))

        if self.band_thresholds is not None:
            errors.extend(self._validate_thresholds(self.band_thresholds))

        if not errors and not self.is_custom:
            errors.extend(self._validate_matches_preset(RiskPreset(self.preset)))

        return errors

    @staticmethod
    def _validate_weights(weights: Dict[str, float]) -> List[FIELD_ERROR]:
        errors: List[FIELD_ERROR] = []
        expected = {f.value for f in RiskFactor}

        unknown = sorted(set(weights) - expected)
        if unknown:
            errors.append(("weights", f"unknown factors: {', '.join(unknown)}"))
        missing = sorted(expected - set(weights))
        if missing:
            errors.append(("weights", f"missing factors: {', '.join(missing)}"))

        for factor in RiskFactor:
            value = weights.get(factor.value)
            if value is None:
                continue
            if not _is_number(value) or not 0.0 <= value <= 1.0:
                errors.append((f"weights.{factor.value}", f"weight for {factor.value} must be between 0 and 1"))

        if not errors and sum(weights.values()) <= 0:
            errors.append(("weights", "weights must sum to more than zero"))

        return errors

    @staticmethod
    def _validate_thresholds(thresholds: Dict[str, int]) -> List[FIELD_ERROR]:
        errors: List[FIELD_ERROR] = []
        for name in ("low_max", "high_min"):
            value = thresholds.get(name)
            if value is None:
                errors.append((f"band_thresholds.{name}", f"{name} is required"))
            elif not _is_int(value) or not 0 <= value <= 100:
                errors.append((f"band_thresholds.{name}", f"{name} must be an integer between 0 and 100"))

        if not errors and thresholds["low_max"] >= thresholds["high_min"]:
            errors.append(("band_thresholds", "low_max must be less than high_min"))

        return errors

    def _validate_matches_preset(self, preset: RiskPreset) -> List[FIELD_ERROR]:
        definition = PRESETS[preset]
        errors: List[FIELD_ERROR] = []

        if self.weights is not None:
            canonical = definition.weights.to_dict()
            if any(not math.isclose(self.weights[k], v, abs_tol=1e-9) for k, v in canonical.items()):
                errors.append(("weights", f"weights differ from the {preset.value} preset; use preset 'custom'"))
        if (
            self.decay_half_life_days is not None
            and self.decay_half_life_days != definition.decay_half_life_days
        ):
            errors.append((
                "decay_half_life_days",
                f"decay_half_life_days differs from the {preset.value} preset; use preset 'custom'",
            ))
        if self.baseline_score is not None and self.baseline_score != definition.baseline_score:
            errors.append((
                "baseline_score",
                f"baseline_score differs from the {preset.value} preset; use preset 'custom'",
            ))
        if (
            self.band_thresholds is not None
            and self.band_thresholds != definition.band_thresholds.to_dict()
        ):
            errors.append((
                "band_thresholds",
                f"band_thresholds differ from the {preset.value} preset; use preset 'custom'",
            ))

        return errors

    def to_config(self, team_id: str, version: int) -> RiskConfig:
        """Build the config entity. Call only after validate() returned no errors."""
        if not self.is_custom:
            return preset_config(team_id, RiskPreset(self.preset), version=version)

        return RiskConfig(
            team_id=team_id,
            preset=RiskPreset.CUSTOM,
            weights=FactorWeights.from_dict(self.weights),
            decay_half_life_days=int(self.decay_half_life_days),
            baseline_score=int(self.baseline_score),
            band_thresholds=BandThresholds(
                low_max=int(self.band_thresholds["low_max"]),
                high_min=int(self.band_thresholds["high_min"]),
            ),
            version=version,
        )


@dataclass(frozen=True)
class FailedDeal:
    """A deal whose recompute failed during a bulk run."""

    deal_id: str
    reason: str

    def to_dict(self) -> dict:
        return {"deal_id": self.deal_id, "reason": self.reason}


@dataclass(frozen=True)
class RecalculationResult:
    """Outcome of a bulk recalculation."""

    recalculated: int
    config_version: int
    failed: List[FailedDeal] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "recalculated": self.recalculated,
            "failed": [f.to_dict() for f in self.failed],
            "config_version": self.config_version,
        }


@dataclass(frozen=True)
class SaveConfigResult:
    """Outcome of saving a config: the new version and the recompute it triggered."""

    config: RiskConfig
    recalculation: RecalculationResult

    def to_dict(self) -> dict:
        return {
            "saved": True,
            "config": self.config.to_dict(),
            "recalculated": self.recalculation.recalculated,
            "failed": [f.to_dict() for f in self.recalculation.failed],
        }
