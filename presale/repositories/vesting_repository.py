"""
Vesting repository.

Data access layer for VestingSchedule model.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from presale.models.vesting_schedule import VestingSchedule
from presale.repositories.base import BaseRepository


class VestingRepository(BaseRepository[VestingSchedule]):
    """Vesting schedule repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize vesting repository."""
        super().__init__(VestingSchedule, session)

    async def get_by_user(
        self, user_id: int, active_only: bool = True
    ) -> list[VestingSchedule]:
        """
        Get vesting schedules of a user.

        Args:
            user_id: User ID
            active_only: Skip deactivated schedules

        Returns:
            List of schedules
        """
        if active_only:
            return await self.find_by(user_id=user_id, is_active=True)
        return await self.find_by(user_id=user_id)

    async def apply_claim(
        self,
        schedule_id: int,
        amount: Decimal,
        expected_version: int,
        claimed_at: datetime,
    ) -> bool:
        """
        Atomically add a claim to the vested and claimed counters.

        Compare-and-swap on ``claim_version``; inactive schedules are
        never updated.

        Args:
            schedule_id: Schedule ID
            amount: Claimed amount
            expected_version: claim_version the claim was computed from
            claimed_at: Claim timestamp

        Returns:
            True if applied, False on conflict
        """
        stmt = (
            update(VestingSchedule)
            .where(VestingSchedule.id == schedule_id)
            .where(VestingSchedule.is_active == True)  # noqa: E712
            .where(VestingSchedule.claim_version == expected_version)
            .values(
                vested_amount=VestingSchedule.vested_amount + amount,
                claimed_amount=VestingSchedule.claimed_amount + amount,
                last_claim_at=claimed_at,
                claim_version=VestingSchedule.claim_version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
