"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from deal_risk.domain.entities import (
    RiskConfig,
    RiskDistribution,
    RiskEvent,
    RiskScore,
)


class RiskConfigRepository(ABC):
    """
    Abstract repository for versioned team risk configurations.

    Every save inserts a new version; the highest version is the
    active one. Rows are never updated.
    """

    @abstractmethod
    async def get_latest(self, team_id: str) -> Optional[RiskConfig]:
        """
        Retrieve the active (highest version) config of a team.

        Args:
            team_id: The team's identifier

        Returns:
            The active config if the team has one, None otherwise
        """
        ...

    @abstractmethod
    async def add(self, config: RiskConfig) -> RiskConfig:
        """
        Insert a new config version.

        Args:
            config: The config to insert

        Returns:
            The inserted config

        Raises:
            RiskConfigVersionConflictException: If the team already has
                a config with the same version
        """
        ...


class RiskScoreRepository(ABC):
    """
    Abstract repository for the current risk score of each deal.

    There is at most one row per deal; recomputes overwrite it.
    """

    @abstractmethod
    async def get(self, deal_id: str, team_id: str) -> Optional[RiskScore]:
        """
        Retrieve the current score of a deal.

        Returns:
            The score if the deal has been scored, None otherwise
        """
        ...

    @abstractmethod
    async def get_many(self, team_id: str, deal_ids: Sequence[str]) -> List[RiskScore]:
        """
        Retrieve current scores for several deals of a team.

        Deals without a score are omitted from the result.
        """
        ...

    @abstractmethod
    async def upsert(self, score: RiskScore) -> RiskScore:
        """
        Insert or overwrite the current score of a deal.

        Args:
            score: The freshly computed score

        Returns:
            The persisted score
        """
        ...

    @abstractmethod
    async def get_distribution(self, team_id: str) -> RiskDistribution:
        """Count the team's current scores per band."""
        ...


class RiskEventRepository(ABC):
    """
    Abstract append-only ledger of score transitions.

    Implementations must never update or delete rows.
    """

    @abstractmethod
    async def append(self, event: RiskEvent) -> RiskEvent:
        """Insert an event."""
        ...

    @abstractmethod
    async def get_by_deal(
        self,
        deal_id: str,
        team_id: str,
        limit: int = 50,
    ) -> List[RiskEvent]:
        """
        Retrieve a deal's events.

        Args:
            deal_id: The deal's identifier
            team_id: The owning team
            limit: Maximum number of events to return

        Returns:
            Events ordered by timestamp descending
        """
        ...
