"""
Platform statistics service.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from presale.models.platform_stats import PlatformStats
from presale.repositories.platform_stats_repository import PlatformStatsRepository


class StatsService:
    """Read access to platform-wide counters."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.stats_repo = PlatformStatsRepository(session)

    async def get_stats(self) -> PlatformStats:
        """
        Get current platform counters.

        Returns:
            PlatformStats row, re-read from the database
        """
        return await self.stats_repo.get_stats()
