"""Global pytest fixtures for the data repository layer.

This module provides shared fixtures for testing including:
- An in-memory SQLite database (aiosqlite) with the test schema
- Data managers with and without access constraints
- Mock data managers for delegation tests
"""

import os
from collections.abc import AsyncGenerator, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables BEFORE settings are first read
os.environ["DATAREPO_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DATAREPO_LOG_JSON"] = "false"

from datarepo.config import get_settings  # noqa: E402
from datarepo.data import (  # noqa: E402
    AccessConstraintsRegistry,
    DataManager,
    FetchPlan,
    FluentLoader,
    Metadata,
)
from datarepo.infrastructure.database.session import create_session_factory  # noqa: E402
from datarepo.repositories import DataRepositoryFactory  # noqa: E402
from tests.factories.entities import Base, Customer  # noqa: E402


# ===========================================
# SETTINGS
# ===========================================


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Re-read settings for every test so monkeypatched env vars apply."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ===========================================
# DATABASE FIXTURES
# ===========================================


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory database shared by all sessions of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine):
    """Session factory bound to the test database."""
    return create_session_factory(engine)


# ===========================================
# DATA MANAGER FIXTURES
# ===========================================


@pytest.fixture
def metadata() -> Metadata:
    """Metadata with a 'customer-with-orders' fetch plan registered."""
    metadata = Metadata()
    metadata.fetch_plans.register(
        FetchPlan(Customer, "customer-with-orders").add("orders")
    )
    return metadata


@pytest.fixture
def constraints() -> AccessConstraintsRegistry:
    """Empty constraints registry; tests add what they need."""
    return AccessConstraintsRegistry()


@pytest.fixture
def data_manager(session_factory, metadata: Metadata, constraints: AccessConstraintsRegistry) -> DataManager:
    """Constrained data manager over the test database."""
    return DataManager(session_factory, metadata, constraints)


@pytest.fixture
def repository_factory(data_manager: DataManager) -> DataRepositoryFactory:
    """Repository factory over the test data manager."""
    return DataRepositoryFactory(data_manager)


# ===========================================
# MOCK FIXTURES
# ===========================================


def _mock_data_manager(name: str) -> MagicMock:
    data_manager = MagicMock(name=name)
    data_manager.metadata = Metadata()
    # Real loaders, so load contexts reach the mocked load_* methods
    data_manager.load.side_effect = lambda entity_class: FluentLoader(entity_class, data_manager)
    data_manager.save = AsyncMock(side_effect=lambda entity: entity)
    data_manager.remove = AsyncMock()
    data_manager.get_count = AsyncMock(return_value=0)
    data_manager.load_list = AsyncMock(return_value=[])
    data_manager.load_one = AsyncMock(return_value=None)
    return data_manager


@pytest.fixture
def mock_unconstrained_data_manager() -> MagicMock:
    """Mock of the unconstrained data manager."""
    return _mock_data_manager("unconstrained_data_manager")


@pytest.fixture
def mock_data_manager(mock_unconstrained_data_manager: MagicMock) -> MagicMock:
    """Mock of the constrained data manager.

    ``unconstrained()`` returns ``mock_unconstrained_data_manager``.
    """
    data_manager = _mock_data_manager("data_manager")
    data_manager.unconstrained.return_value = mock_unconstrained_data_manager
    return data_manager
