"""
Staking repositories.

Data access layer for StakingPool, Stake and StakingRewardClaim models.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from presale.models.enums import StakeStatus
from presale.models.stake import Stake, StakingRewardClaim
from presale.models.staking_pool import StakingPool
from presale.repositories.base import BaseRepository


class StakingPoolRepository(BaseRepository[StakingPool]):
    """Staking pool repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize staking pool repository."""
        super().__init__(StakingPool, session)

    async def get_active_pools(self) -> list[StakingPool]:
        """Get pools open for new stakes."""
        return await self.find_by(is_active=True)

    async def get_by_name(self, name: str) -> StakingPool | None:
        """Get pool by unique name."""
        return await self.get_by(name=name)


class StakeRepository(BaseRepository[Stake]):
    """Stake repository with claim bookkeeping."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize stake repository."""
        super().__init__(Stake, session)

    async def get_by_user(
        self, user_id: int, status: StakeStatus | None = None
    ) -> list[Stake]:
        """
        Get stakes by user.

        Args:
            user_id: User ID
            status: Optional status filter

        Returns:
            List of stakes
        """
        filters: dict[str, int | str] = {"user_id": user_id}
        if status:
            filters["status"] = status.value

        return await self.find_by(**filters)

    async def apply_reward_claim(
        self,
        stake_id: int,
        amount: Decimal,
        expected_version: int,
        claimed_at: datetime,
    ) -> bool:
        """
        Atomically add a claim to both lifetime counters.

        The update only applies while ``claim_version`` still equals
        ``expected_version`` and the stake is active; a concurrent claim
        bumps the version and makes this one a no-op.

        Args:
            stake_id: Stake ID
            amount: Claimed amount
            expected_version: claim_version the claim was computed from
            claimed_at: Claim timestamp

        Returns:
            True if applied, False on conflict
        """
        stmt = (
            update(Stake)
            .where(Stake.id == stake_id)
            .where(Stake.status == StakeStatus.ACTIVE.value)
            .where(Stake.claim_version == expected_version)
            .values(
                rewards_earned=Stake.rewards_earned + amount,
                rewards_claimed=Stake.rewards_claimed + amount,
                last_claim_at=claimed_at,
                claim_version=Stake.claim_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_withdrawn(
        self, stake_id: int, withdrawn_at: datetime
    ) -> bool:
        """
        Close an active stake.

        Args:
            stake_id: Stake ID
            withdrawn_at: Withdrawal timestamp

        Returns:
            True if the stake was active and is now withdrawn
        """
        stmt = (
            update(Stake)
            .where(Stake.id == stake_id)
            .where(Stake.status == StakeStatus.ACTIVE.value)
            .values(status=StakeStatus.WITHDRAWN.value, withdrawn_at=withdrawn_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def add_claim_record(
        self, stake: Stake, amount: Decimal, claimed_at: datetime
    ) -> StakingRewardClaim:
        """
        Append an immutable claim record.

        Args:
            stake: Stake the claim belongs to
            amount: Claimed amount
            claimed_at: Claim timestamp

        Returns:
            Created claim record
        """
        claim = StakingRewardClaim(
            stake_id=stake.id,
            user_id=stake.user_id,
            amount=amount,
            claimed_at=claimed_at,
        )
        self.session.add(claim)
        await self.session.flush()
        return claim

    async def get_claims(self, stake_id: int) -> list[StakingRewardClaim]:
        """
        Get claim history of a stake, oldest first.

        Args:
            stake_id: Stake ID

        Returns:
            List of claim records
        """
        stmt = (
            select(StakingRewardClaim)
            .where(StakingRewardClaim.stake_id == stake_id)
            .order_by(StakingRewardClaim.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
