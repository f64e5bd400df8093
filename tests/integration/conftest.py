"""
Fixtures for integration tests.

Provides:
- File-backed SQLite database shared by every unit of work
- Mock deal data client with scriptable histories and failures
- Risk services wired to both
- Test client for the FastAPI app
"""

import asyncio
from collections import defaultdict
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from deal_risk.application.locks import DealLockRegistry
from deal_risk.application.services import RiskConfigService, RiskService
from deal_risk.core.clock import utcnow
from deal_risk.core.dependencies import get_deal_client, get_uow_factory
from deal_risk.domain.entities import DealHistory
from deal_risk.domain.exceptions import DealNotFoundException
from deal_risk.domain.interfaces import DealDataClient
from deal_risk.infrastructure.database import Base
from deal_risk.infrastructure.repositories import sqlalchemy_uow_factory
from deal_risk.main import app
from deal_risk.service.scoring import ScoringSettings


# =============================================================================
# Mock Clients
# =============================================================================

class MockDealDataClient(DealDataClient):
    """
    In-memory deal data API.

    Deals are enumerated in the order they were added. A deal can be made
    to fail with any exception, or to block until a test releases it.
    """

    def __init__(self):
        self.histories: Dict[Tuple[str, str], DealHistory] = {}
        self.deal_ids: Dict[str, List[str]] = defaultdict(list)
        self.failures: Dict[str, Exception] = {}
        self.blockers: Dict[str, asyncio.Event] = {}
        self.started: Dict[str, asyncio.Event] = {}
        self.list_failure: Optional[Exception] = None
        self.fetch_calls: List[str] = []

    def add(self, history: DealHistory) -> None:
        key = (history.deal.team_id, history.deal_id)
        if key not in self.histories:
            self.deal_ids[history.deal.team_id].append(history.deal_id)
        self.histories[key] = history

    def fail(self, team_id: str, deal_id: str, error: Exception) -> None:
        if deal_id not in self.deal_ids[team_id]:
            self.deal_ids[team_id].append(deal_id)
        self.failures[deal_id] = error

    def block(self, deal_id: str) -> Tuple[asyncio.Event, asyncio.Event]:
        """Make fetches of ``deal_id`` wait; returns (started, release)."""
        self.started[deal_id] = asyncio.Event()
        self.blockers[deal_id] = asyncio.Event()
        return self.started[deal_id], self.blockers[deal_id]

    async def fetch_deal_history(self, deal_id: str, team_id: str) -> DealHistory:
        self.fetch_calls.append(deal_id)

        if deal_id in self.started:
            self.started[deal_id].set()
        if deal_id in self.blockers:
            await self.blockers[deal_id].wait()

        if deal_id in self.failures:
            raise self.failures[deal_id]

        history = self.histories.get((team_id, deal_id))
        if history is None:
            raise DealNotFoundException(deal_id, team_id)
        return history

    async def list_deal_ids(self, team_id: str) -> List[str]:
        if self.list_failure is not None:
            raise self.list_failure
        return list(self.deal_ids.get(team_id, []))


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """
    Create a file-backed SQLite async engine for testing.

    Every transaction starts with BEGIN IMMEDIATE so concurrent units of
    work queue on the database write lock instead of failing.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'risk.db'}")

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest.fixture
def uow_factory(session_factory):
    return sqlalchemy_uow_factory(session_factory)


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def today():
    """The date the services score against when no as_of is given."""
    return utcnow().date()


@pytest.fixture
def deal_client() -> MockDealDataClient:
    return MockDealDataClient()


@pytest.fixture
def risk_service(uow_factory, deal_client) -> RiskService:
    return RiskService(
        uow_factory=uow_factory,
        deal_client=deal_client,
        locks=DealLockRegistry(),
        concurrency=4,
        scoring=ScoringSettings(),
        events_default_limit=50,
        events_max_limit=500,
    )


@pytest.fixture
def config_service(uow_factory, risk_service) -> RiskConfigService:
    return RiskConfigService(uow_factory=uow_factory, risk_service=risk_service)


# =============================================================================
# App Client Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def client(
    uow_factory,
    deal_client: MockDealDataClient,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with mocked dependencies.

    This client:
    - Uses the file-backed SQLite database
    - Serves deals from the mock deal data client
    """
    app.dependency_overrides[get_uow_factory] = lambda: uow_factory
    app.dependency_overrides[get_deal_client] = lambda: deal_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
