"""
Referral repository.

Data access layer for Referral and ReferralEarning models.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from presale.config.business_constants import REFERRAL_DEPTH
from presale.models.referral import Referral, ReferralEarning
from presale.repositories.base import BaseRepository


class ReferralRepository(BaseRepository[Referral]):
    """Referral repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize referral repository."""
        super().__init__(Referral, session)

    async def get_by_referral_user(
        self, referral_user_id: int
    ) -> list[Referral]:
        """
        Get upline links of a referred user, nearest level first.

        Args:
            referral_user_id: Referred user ID

        Returns:
            List of referrals ordered by level
        """
        stmt = (
            select(Referral)
            .where(Referral.referral_id == referral_user_id)
            .order_by(Referral.level)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_link(
        self, referrer_id: int, referral_id: int
    ) -> Referral | None:
        """
        Get the link between a referrer and a referred user.

        Args:
            referrer_id: Referrer user ID
            referral_id: Referred user ID

        Returns:
            Referral or None
        """
        return await self.get_by(referrer_id=referrer_id, referral_id=referral_id)

    async def get_referral_stats(
        self, referrer_id: int
    ) -> dict[int, dict[str, int | Decimal]]:
        """
        Get referral statistics grouped by level in a single query.

        Args:
            referrer_id: Referrer user ID

        Returns:
            Dict mapping level to stats {
                1: {"count": 5, "total_earned": Decimal("10.50")},
                2: {"count": 3, "total_earned": Decimal("5.25")},
                ...
            }
        """
        stmt = (
            select(
                Referral.level,
                func.count(Referral.id).label("count"),
                func.coalesce(
                    func.sum(Referral.total_earned),
                    Decimal("0")
                ).label("total_earned")
            )
            .where(Referral.referrer_id == referrer_id)
            .group_by(Referral.level)
        )

        result = await self.session.execute(stmt)
        rows = result.all()

        stats: dict[int, dict[str, int | Decimal]] = {
            level: {"count": 0, "total_earned": Decimal("0")}
            for level in range(1, REFERRAL_DEPTH + 1)
        }
        for row in rows:
            stats[row.level] = {
                "count": row.count,
                "total_earned": Decimal(str(row.total_earned)),
            }

        return stats

    async def add_earning(
        self,
        referral: Referral,
        amount: Decimal,
        source_transaction_id: int | None = None,
    ) -> ReferralEarning:
        """
        Record a commission and bump the link's lifetime total.

        Args:
            referral: Referral link
            amount: Commission amount (> 0)
            source_transaction_id: Ledger entry that generated it

        Returns:
            Created earning record
        """
        earning = ReferralEarning(
            referral_id=referral.id,
            source_transaction_id=source_transaction_id,
            amount=amount,
        )
        self.session.add(earning)
        await self.increment(referral.id, total_earned=amount)
        await self.session.flush()
        return earning
