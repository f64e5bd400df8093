"""
Scoring Settings for the Deal Risk Engine.

Engine tunables that are not part of a team's risk configuration.
Team-level parameters (weights, half-life, baseline, band thresholds)
live in RiskConfig; the values here shape how raw payment history is
turned into evidence and are shared by every team.

Environment variables use the SCORING_ prefix:
    SCORING_PAYMENT_TOLERANCE=0.10
    SCORING_DEFAULT_TERM_DAYS=180

Usage:
    from deal_risk.service.scoring.settings import scoring_settings

    # Use default settings (loaded from env)
    tolerance = scoring_settings.payment_tolerance

    # Or create custom settings for testing
    custom = ScoringSettings(default_term_days=120)
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringSettings(BaseSettings):
    """
    Configurable parameters for evidence extraction.

    All settings can be overridden via environment variables with SCORING_ prefix.
    All magnitudes are 0-100 where higher means riskier.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Payment Classification ===
    payment_tolerance: float = Field(
        default=0.10,
        ge=0.0,
        lt=1.0,
        description="Fractional deviation from the expected payment still treated as on time",
    )

    # === Velocity ===
    default_term_days: int = Field(
        default=180,
        ge=1,
        description="Expected repayment term when the deal does not carry one",
    )
    min_days_funded: float = Field(
        default=1.0,
        ge=0.0,
        description="Deals funded more recently than this have no velocity evidence",
    )

    # === Amount Accuracy ===
    max_payment_accuracy: float = Field(
        default=1.5,
        gt=1.0,
        description="Cap on amount/expected so one large overpayment cannot mask shortfalls",
    )

    # === Consistency Magnitudes ===
    consistency_recovery_magnitude: float = Field(
        default=40.0,
        ge=0.0,
        le=100.0,
        description="Consistency magnitude of a catch-up payment after misses",
    )
    consistency_partial_magnitude: float = Field(
        default=50.0,
        ge=0.0,
        le=100.0,
        description="Consistency magnitude of an underpayment",
    )


@lru_cache
def get_scoring_settings() -> ScoringSettings:
    """Get cached scoring settings instance."""
    return ScoringSettings()


scoring_settings = get_scoring_settings()
