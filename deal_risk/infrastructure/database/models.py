"""SQLAlchemy ORM models for deal risk entities."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    DateTime,
    Index,
    Integer,
    JSON,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from deal_risk.core.clock import utcnow


class Base(DeclarativeBase):
    pass


class RiskConfigModel(Base):
    """One persisted version of a team's risk configuration."""

    __tablename__ = "risk_configs"
    __table_args__ = (
        UniqueConstraint("team_id", "version", name="uq_risk_configs_team_version"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    team_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    preset: Mapped[str] = mapped_column(String(50), nullable=False)
    weights: Mapped[dict] = mapped_column(JSON, nullable=False)
    decay_half_life_days: Mapped[int] = mapped_column(Integer, nullable=False)
    baseline_score: Mapped[int] = mapped_column(Integer, nullable=False)
    low_max: Mapped[int] = mapped_column(Integer, nullable=False)
    high_min: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class RiskScoreModel(Base):
    """Current risk score of a deal, overwritten on every recompute."""

    __tablename__ = "risk_scores"

    team_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    deal_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    band: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    previous_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    config_version: Mapped[int] = mapped_column(Integer, nullable=False)
    factor_breakdown: Mapped[dict] = mapped_column(JSON, nullable=False)
    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class RiskEventModel(Base):
    """Append-only audit record of a recompute."""

    __tablename__ = "risk_events"
    __table_args__ = (
        Index("ix_risk_events_team_deal_timestamp", "team_id", "deal_id", "timestamp"),
    )

    id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    team_id: Mapped[str] = mapped_column(String(255), nullable=False)
    deal_id: Mapped[str] = mapped_column(String(255), nullable=False)
    previous_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_score: Mapped[int] = mapped_column(Integer, nullable=False)
    new_band: Mapped[str] = mapped_column(String(20), nullable=False)
    factor_breakdown: Mapped[dict] = mapped_column(JSON, nullable=False)
    trigger: Mapped[str] = mapped_column(String(50), nullable=False)
    config_version: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
