"""
Platform statistics repository.

Maintains the single platform_stats row through atomic increments.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from presale.config.business_constants import PLATFORM_STATS_ROW_ID
from presale.models.platform_stats import PlatformStats
from presale.repositories.base import BaseRepository


class PlatformStatsRepository(BaseRepository[PlatformStats]):
    """Platform statistics repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize platform stats repository."""
        super().__init__(PlatformStats, session)

    async def get_or_create(self) -> PlatformStats:
        """
        Get the stats row, creating it with zero counters if missing.

        Returns:
            PlatformStats row
        """
        stats = await self.get_by_id(PLATFORM_STATS_ROW_ID)
        if stats is None:
            stats = await self.create(id=PLATFORM_STATS_ROW_ID)
        return stats

    async def bump(self, **deltas: Decimal | int) -> None:
        """
        Atomically add deltas to platform counters.

        Args:
            **deltas: Counter name to delta
        """
        await self.get_or_create()
        await self.increment(PLATFORM_STATS_ROW_ID, **deltas)

    async def get_stats(self) -> PlatformStats:
        """
        Get current counters, re-read from the database.

        Returns:
            PlatformStats row
        """
        stats = await self.get_or_create()
        await self.session.refresh(stats)
        return stats
