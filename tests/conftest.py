"""Pytest configuration and shared fixtures.

Usage Guide:
- For ORM model tests: import factories from tests.factories
- For GitHub API payloads: use the dict factories (make_search_item, etc.)
- For the GitHub client: use the mock_client fixture (AsyncMock)
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from review_activity_db.config import get_settings
from review_activity_db.db.models import Base

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# Define a consistent "test epoch" for deterministic date matching across tests.
# All hardcoded dates should reference these constants for consistency.
# -----------------------------------------------------------------------------

# Base dates (datetime objects for Pydantic/ORM)
JAN_10 = datetime(2025, 1, 10, 9, 0, 0, tzinfo=UTC)  # First PR opened
JAN_15 = datetime(2025, 1, 15, 10, 0, 0, tzinfo=UTC)  # Second PR opened
MAR_01 = datetime(2025, 3, 1, 12, 0, 0, tzinfo=UTC)  # Previous sync
APR_15 = datetime(2025, 4, 15, 8, 30, 0, tzinfo=UTC)  # Q2 PR opened

# ISO 8601 strings (for GitHub API mocks)
JAN_10_ISO = "2025-01-10T09:00:00Z"
JAN_12_ISO = "2025-01-12T16:00:00Z"
JAN_15_ISO = "2025-01-15T10:00:00Z"
JAN_16_ISO = "2025-01-16T14:00:00Z"
APR_15_ISO = "2025-04-15T08:30:00Z"


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _test_settings(monkeypatch):
    """Isolate every test from the developer's environment and .env file."""
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("ENVIRONMENT", "development")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite engine for tests.

    Each test gets a fresh database with all tables created.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine):
    """Create an async session with auto-rollback.

    Changes are rolled back after each test to ensure isolation.
    """
    session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def file_db_url(tmp_path):
    """File-backed database shared by several engines (background workers)."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()
    return url


# -----------------------------------------------------------------------------
# GitHub Client Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_client():
    """GitHubClient stand-in with every API method as an AsyncMock."""
    client = AsyncMock()
    client.search_pull_requests.return_value = []
    client.search_open_pull_requests.return_value = []
    client.list_issue_comments.return_value = []
    client.list_review_comments.return_value = []
    client.__aenter__.return_value = client
    client.__aexit__.return_value = None
    return client


# -----------------------------------------------------------------------------
# Utility Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def utc_now() -> datetime:
    """Current UTC datetime for tests."""
    return datetime.now(UTC)
