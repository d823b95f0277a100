"""Engine and session factories built from settings."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from presale.config.settings import Settings, settings


def create_engine(config: Settings | None = None) -> AsyncEngine:
    """
    Create the async engine for DATABASE_URL.

    The driver named in the URL (asyncpg for the default PostgreSQL URL)
    is loaded here; no connection is opened until first use.
    """
    config = config or settings
    return create_async_engine(
        config.database_url,
        echo=config.database_echo,
        poolclass=NullPool,
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a session maker for service sessions."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
