"""External client interfaces."""

from abc import ABC, abstractmethod
from typing import List

from deal_risk.domain.entities import DealHistory


class DealDataClient(ABC):
    """
    Abstract client for the deal data collaborator.

    The collaborator is the sole source of truth for deals and their
    payments. The engine only reads from it.
    """

    @abstractmethod
    async def fetch_deal_history(self, deal_id: str, team_id: str) -> DealHistory:
        """
        Fetch a deal with its complete payment history.

        Args:
            deal_id: The deal's identifier
            team_id: The owning team

        Returns:
            The deal and all of its payments

        Raises:
            DealNotFoundException: If the deal doesn't exist for the team
            DealDataAccessException: If the collaborator returns an error
            DealDataTimeoutException: If the request times out
        """
        ...

    @abstractmethod
    async def list_deal_ids(self, team_id: str) -> List[str]:
        """
        List the identifiers of every deal of a team.

        Raises:
            DealDataAccessException: If the collaborator returns an error
        """
        ...
