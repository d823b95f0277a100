"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings() at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from presale.models import Base


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.delete = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Database session; objects stay readable after commit."""
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def t0() -> datetime:
    """Fixed reference instant for time-dependent tests."""
    return datetime(2024, 1, 1, tzinfo=UTC)


@pytest.fixture
def sample_wallet_address() -> str:
    """Sample EVM wallet address."""
    return "0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0"


def make_wallet(n: int) -> str:
    """Deterministic distinct wallet address."""
    return "0x" + f"{n:040x}"


@pytest.fixture
def wallet():
    """Factory for deterministic wallet addresses."""
    return make_wallet


@pytest_asyncio.fixture
async def user(db_session):
    """Registered user without a referrer."""
    from presale.services.user_service import UserService

    return await UserService(db_session).register_user(make_wallet(1))


@pytest_asyncio.fixture
async def pool(db_session):
    """Staking pool paying 0.1% per day, no lock."""
    from presale.schemas import StakingPoolConfig
    from presale.services.staking_service import StakingService

    return await StakingService(db_session).create_pool(
        StakingPoolConfig(
            name="Flexible",
            apr_percent=Decimal("36.5"),
            lock_days=0,
            min_stake=Decimal("10"),
            max_stake=Decimal("100000"),
        )
    )
