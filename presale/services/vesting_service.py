"""
Vesting service.

Creates token grants and pays out the unlocked part on request.
"""

from datetime import datetime
from decimal import Decimal

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from presale.models.enums import TransactionStatus, TransactionType
from presale.models.vesting_schedule import VestingSchedule
from presale.repositories.platform_stats_repository import PlatformStatsRepository
from presale.repositories.transaction_repository import TransactionRepository
from presale.repositories.user_repository import UserRepository
from presale.repositories.vesting_repository import VestingRepository
from presale.utils.datetime_utils import ensure_utc, utc_now
from presale.utils.db_decorators import with_auto_commit
from presale.utils.exceptions import (
    ConcurrentUpdateConflictError,
    OverclaimAttemptError,
    UserNotFoundError,
    ValidationError,
    VestingScheduleNotFoundError,
)
from presale.utils.validation import validate_amount
from presale_calculator import (
    InvalidScheduleError,
    VestingAmountCalculator,
    VestingSnapshot,
)


class VestingService:
    """Vesting schedules and claims."""

    def __init__(
        self,
        session: AsyncSession,
        calculator: VestingAmountCalculator | None = None,
    ) -> None:
        """Initialize vesting service."""
        self.session = session
        self.calculator = calculator or VestingAmountCalculator()
        self.vesting_repo = VestingRepository(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.stats_repo = PlatformStatsRepository(session)

    @with_auto_commit
    async def create_schedule(
        self,
        user_id: int,
        total_amount: Decimal | str,
        start_date: datetime,
        end_date: datetime,
        cliff_date: datetime | None = None,
        presale_id: int | None = None,
        label: str | None = None,
    ) -> VestingSchedule:
        """
        Create a vesting schedule for a user.

        Args:
            user_id: Beneficiary user ID
            total_amount: Total granted amount (> 0)
            start_date: Vesting start
            end_date: Vesting end (after start)
            cliff_date: Optional cliff within [start, end]
            presale_id: Presale the grant comes from
            label: Free-form label

        Returns:
            Created schedule

        Raises:
            UserNotFoundError: If the user does not exist
            InvalidScheduleError: If the schedule is malformed
        """
        total_amount = validate_amount(
            total_amount, "total_amount", InvalidScheduleError
        )

        start_date = ensure_utc(start_date)
        end_date = ensure_utc(end_date)
        cliff_date = ensure_utc(cliff_date)
        self.calculator.validate_schedule(
            total_amount=total_amount,
            start_date=start_date,
            end_date=end_date,
            cliff_date=cliff_date,
            strict_cliff=True,
        )

        if await self.user_repo.get_by_id(user_id) is None:
            raise UserNotFoundError(user_id)

        schedule = await self.vesting_repo.create(
            user_id=user_id,
            presale_id=presale_id,
            label=label,
            total_amount=total_amount,
            start_date=start_date,
            cliff_date=cliff_date,
            end_date=end_date,
        )

        logger.info(
            "Vesting schedule created",
            extra={
                "schedule_id": schedule.id,
                "user_id": user_id,
                "total_amount": str(total_amount),
                "has_cliff": cliff_date is not None,
            },
        )
        return schedule

    async def get_schedule(self, schedule_id: int) -> VestingSchedule:
        """
        Get schedule by ID.

        Raises:
            VestingScheduleNotFoundError: If the schedule does not exist
        """
        schedule = await self.vesting_repo.get_by_id(schedule_id)
        if schedule is None:
            raise VestingScheduleNotFoundError(schedule_id)
        return schedule

    async def get_claimable(
        self, schedule_id: int, now: datetime | None = None
    ) -> Decimal:
        """
        Get the amount claimable right now.

        Deactivated schedules have nothing claimable.

        Args:
            schedule_id: Schedule ID
            now: Current time (defaults to UTC now)

        Returns:
            Unlocked, unclaimed amount
        """
        schedule = await self.get_schedule(schedule_id)
        if not schedule.is_active:
            return Decimal("0")
        return self._claimable(schedule, ensure_utc(now) or utc_now())

    @with_auto_commit
    async def claim(
        self,
        schedule_id: int,
        amount: Decimal | str,
        now: datetime | None = None,
    ) -> VestingSchedule:
        """
        Claim unlocked tokens.

        Args:
            schedule_id: Schedule ID
            amount: Amount to claim (> 0, at most the claimable amount)
            now: Claim time (defaults to UTC now)

        Returns:
            Updated schedule

        Raises:
            VestingScheduleNotFoundError: If the schedule does not exist
            ValidationError: If the schedule is inactive or amount invalid
            OverclaimAttemptError: If amount exceeds the claimable amount
            ConcurrentUpdateConflictError: If another claim won the race
        """
        now = ensure_utc(now) or utc_now()
        amount = validate_amount(amount)

        schedule = await self.vesting_repo.get_for_update(schedule_id)
        if schedule is None:
            raise VestingScheduleNotFoundError(schedule_id)
        if not schedule.is_active:
            raise ValidationError(f"Vesting schedule {schedule_id} is inactive")

        available = self._claimable(schedule, now)
        if amount > available:
            logger.warning(
                "Vesting overclaim rejected",
                extra={
                    "schedule_id": schedule_id,
                    "requested": str(amount),
                    "available": str(available),
                },
            )
            raise OverclaimAttemptError(amount, available)

        applied = await self.vesting_repo.apply_claim(
            schedule_id, amount, schedule.claim_version, now
        )
        if not applied:
            logger.warning(
                "Vesting claim lost a concurrent update",
                extra={"schedule_id": schedule_id, "amount": str(amount)},
            )
            raise ConcurrentUpdateConflictError(
                f"Vesting schedule {schedule_id} was updated concurrently, "
                "retry the claim"
            )

        await self.stats_repo.bump(total_vested_claimed=amount)
        await self.transaction_repo.create(
            user_id=schedule.user_id,
            presale_id=schedule.presale_id,
            type=TransactionType.VESTING_CLAIM.value,
            status=TransactionStatus.CONFIRMED.value,
            amount=Decimal("0"),
            token_amount=amount,
            reference_id=schedule.id,
            created_at=now,
            confirmed_at=now,
        )
        await self.session.refresh(schedule)

        logger.info(
            "Vesting claimed",
            extra={
                "schedule_id": schedule_id,
                "user_id": schedule.user_id,
                "amount": str(amount),
            },
        )
        return schedule

    @with_auto_commit
    async def deactivate(self, schedule_id: int) -> VestingSchedule:
        """Soft-disable a schedule; claimed history is kept."""
        schedule = await self.vesting_repo.update(schedule_id, is_active=False)
        if schedule is None:
            raise VestingScheduleNotFoundError(schedule_id)
        logger.warning(
            "Vesting schedule deactivated",
            extra={"schedule_id": schedule_id, "user_id": schedule.user_id},
        )
        return schedule

    async def get_user_schedules(
        self, user_id: int, active_only: bool = True
    ) -> list[VestingSchedule]:
        return await self.vesting_repo.get_by_user(user_id, active_only)

    def _claimable(self, schedule: VestingSchedule, now: datetime) -> Decimal:
        try:
            snapshot = VestingSnapshot(
                total_amount=schedule.total_amount,
                start_date=schedule.start_date,
                end_date=schedule.end_date,
                cliff_date=schedule.cliff_date,
                claimed_amount=schedule.claimed_amount,
            )
        except PydanticValidationError as e:
            raise InvalidScheduleError(
                f"Vesting schedule {schedule.id} holds invalid data: {e}"
            ) from e
        return self.calculator.compute_for_schedule(snapshot, now)
