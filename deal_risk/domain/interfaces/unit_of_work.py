"""Unit of work interface grouping the risk repositories."""

from abc import ABC, abstractmethod

from .repositories import (
    RiskConfigRepository,
    RiskEventRepository,
    RiskScoreRepository,
)


class RiskUnitOfWork(ABC):
    """
    A transactional scope over the risk repositories.

    Used as an async context manager. Work is only durable after
    ``commit()``; leaving the block with an exception rolls back.
    Each recompute runs in its own unit of work so a bulk run can
    commit deal by deal.
    """

    configs: RiskConfigRepository
    scores: RiskScoreRepository
    events: RiskEventRepository

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Round-trip to the backing store; raises if it is unreachable."""
        ...

    async def __aenter__(self) -> "RiskUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            await self.close()
