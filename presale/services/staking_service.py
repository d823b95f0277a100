"""
Staking service.

Pool management, staking, reward claims and withdrawals. Reward
amounts come from StakingRewardCalculator; counters are written with
compare-and-swap updates so two concurrent claims can never both
succeed against the same accrued balance.
"""

from datetime import datetime, timedelta
from decimal import ROUND_DOWN, Decimal

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from presale.config.business_constants import AMOUNT_QUANTUM
from presale.config.settings import settings
from presale.models.enums import StakeStatus, TransactionStatus, TransactionType
from presale.models.stake import Stake, StakingRewardClaim
from presale.models.staking_pool import StakingPool
from presale.repositories.platform_stats_repository import PlatformStatsRepository
from presale.repositories.staking_repository import (
    StakeRepository,
    StakingPoolRepository,
)
from presale.repositories.transaction_repository import TransactionRepository
from presale.repositories.user_repository import UserRepository
from presale.schemas import StakingPoolConfig
from presale.utils.datetime_utils import ensure_utc, utc_now
from presale.utils.db_decorators import with_auto_commit
from presale.utils.exceptions import (
    ConcurrentUpdateConflictError,
    OverclaimAttemptError,
    StakeNotFoundError,
    StakingPoolNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from presale.utils.validation import validate_amount
from presale_calculator import StakeSnapshot, StakingRewardCalculator


class StakingService:
    """Staking pools and user stakes."""

    def __init__(
        self,
        session: AsyncSession,
        calculator: StakingRewardCalculator | None = None,
    ) -> None:
        """
        Initialize staking service.

        Args:
            session: Database session
            calculator: Reward calculator (a default one is created if omitted)
        """
        self.session = session
        self.calculator = calculator or StakingRewardCalculator()
        self.pool_repo = StakingPoolRepository(session)
        self.stake_repo = StakeRepository(session)
        self.user_repo = UserRepository(session)
        self.transaction_repo = TransactionRepository(session)
        self.stats_repo = PlatformStatsRepository(session)

    @with_auto_commit
    async def create_pool(self, config: StakingPoolConfig) -> StakingPool:
        """
        Create a staking pool.

        Args:
            config: Validated pool configuration

        Returns:
            Created pool

        Raises:
            ValidationError: If a pool with that name exists
        """
        if await self.pool_repo.get_by_name(config.name):
            raise ValidationError(f"Staking pool {config.name!r} already exists")

        pool = await self.pool_repo.create(**config.model_dump())
        logger.info(
            "Staking pool created",
            extra={
                "pool_id": pool.id,
                "apr_percent": str(pool.apr_percent),
                "lock_days": pool.lock_days,
            },
        )
        return pool

    @with_auto_commit
    async def set_pool_active(self, pool_id: int, active: bool) -> StakingPool:
        """Open or close a pool for new stakes. Existing stakes keep accruing."""
        pool = await self.pool_repo.update(pool_id, is_active=active)
        if pool is None:
            raise StakingPoolNotFoundError(pool_id)
        logger.info(
            "Staking pool state changed",
            extra={"pool_id": pool_id, "is_active": active},
        )
        return pool

    async def get_pool(self, pool_id: int) -> StakingPool:
        """
        Get pool by ID.

        Raises:
            StakingPoolNotFoundError: If the pool does not exist
        """
        pool = await self.pool_repo.get_by_id(pool_id)
        if pool is None:
            raise StakingPoolNotFoundError(pool_id)
        return pool

    async def get_active_pools(self) -> list[StakingPool]:
        return await self.pool_repo.get_active_pools()

    @with_auto_commit
    async def stake(
        self,
        user_id: int,
        pool_id: int,
        amount: Decimal | str,
        now: datetime | None = None,
    ) -> Stake:
        """
        Open a new stake.

        Args:
            user_id: User ID
            pool_id: Pool ID
            amount: Principal
            now: Staking time (defaults to UTC now)

        Returns:
            Created stake

        Raises:
            UserNotFoundError: If the user does not exist
            StakingPoolNotFoundError: If the pool does not exist
            ValidationError: If staking is disabled or limits are violated
        """
        if not settings.staking_enabled:
            raise ValidationError("Staking is currently disabled")

        now = ensure_utc(now) or utc_now()
        amount = validate_amount(amount)

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if user.is_banned or not user.is_active:
            raise ValidationError(f"User {user_id} cannot stake")

        pool = await self.get_pool(pool_id)
        if not pool.is_active:
            raise ValidationError(f"Staking pool {pool_id} is closed")
        if amount < pool.min_stake:
            raise ValidationError(
                f"Amount {amount} is below minimum stake {pool.min_stake}"
            )
        if pool.max_stake is not None and amount > pool.max_stake:
            raise ValidationError(
                f"Amount {amount} exceeds maximum stake {pool.max_stake}"
            )

        stake = await self.stake_repo.create(
            user_id=user_id,
            pool_id=pool_id,
            amount=amount,
            staking_date=now,
            status=StakeStatus.ACTIVE.value,
        )
        await self.pool_repo.increment(pool_id, total_staked=amount)
        await self.stats_repo.bump(total_staked=amount)
        await self._record_ledger(
            stake, TransactionType.STAKE, amount, now
        )

        logger.info(
            "Stake created",
            extra={
                "stake_id": stake.id,
                "user_id": user_id,
                "pool_id": pool_id,
                "amount": str(amount),
            },
        )
        return stake

    async def get_stake(self, stake_id: int) -> Stake:
        """
        Get stake by ID.

        Raises:
            StakeNotFoundError: If the stake does not exist
        """
        stake = await self.stake_repo.get_by_id(stake_id)
        if stake is None:
            raise StakeNotFoundError(stake_id)
        return stake

    async def get_accrued_reward(
        self, stake_id: int, now: datetime | None = None
    ) -> Decimal:
        """
        Get the reward currently claimable from a stake.

        Withdrawn stakes have nothing left to claim.

        Args:
            stake_id: Stake ID
            now: Current time (defaults to UTC now)

        Returns:
            Accrued, unclaimed reward
        """
        stake = await self.get_stake(stake_id)
        if not stake.is_active:
            return Decimal("0")
        pool = await self.get_pool(stake.pool_id)
        return self._accrued(stake, pool, ensure_utc(now) or utc_now())

    @with_auto_commit
    async def claim_rewards(
        self,
        stake_id: int,
        amount: Decimal | str,
        now: datetime | None = None,
    ) -> StakingRewardClaim:
        """
        Claim part or all of the accrued reward.

        Args:
            stake_id: Stake ID
            amount: Amount to claim (> 0, at most the accrued reward)
            now: Claim time (defaults to UTC now)

        Returns:
            Claim record

        Raises:
            StakeNotFoundError: If the stake does not exist
            ValidationError: If the stake is withdrawn or amount is invalid
            OverclaimAttemptError: If amount exceeds the accrued reward
            ConcurrentUpdateConflictError: If another claim won the race
        """
        now = ensure_utc(now) or utc_now()
        amount = validate_amount(amount)

        stake = await self.stake_repo.get_for_update(stake_id)
        if stake is None:
            raise StakeNotFoundError(stake_id)
        if not stake.is_active:
            raise ValidationError(f"Stake {stake_id} is withdrawn")

        user = await self.user_repo.get_by_id(stake.user_id)
        if user is not None and user.is_banned:
            raise ValidationError(f"User {stake.user_id} cannot claim")

        pool = await self.get_pool(stake.pool_id)
        available = self._accrued(stake, pool, now)
        if amount > available:
            logger.warning(
                "Staking overclaim rejected",
                extra={
                    "stake_id": stake_id,
                    "requested": str(amount),
                    "available": str(available),
                },
            )
            raise OverclaimAttemptError(amount, available)

        return await self._apply_claim(stake, amount, now)

    @with_auto_commit
    async def withdraw(
        self, stake_id: int, now: datetime | None = None
    ) -> Stake:
        """
        Close a stake after its lock period and return the principal.

        Any reward still accrued is claimed first, unless the user is
        banned; a banned user gets the principal back without the reward.

        Args:
            stake_id: Stake ID
            now: Withdrawal time (defaults to UTC now)

        Returns:
            Withdrawn stake

        Raises:
            StakeNotFoundError: If the stake does not exist
            ValidationError: If already withdrawn or still locked
            ConcurrentUpdateConflictError: If the stake changed concurrently
        """
        now = ensure_utc(now) or utc_now()

        stake = await self.stake_repo.get_for_update(stake_id)
        if stake is None:
            raise StakeNotFoundError(stake_id)
        if not stake.is_active:
            raise ValidationError(f"Stake {stake_id} is already withdrawn")

        pool = await self.get_pool(stake.pool_id)
        unlock_at = ensure_utc(stake.staking_date) + timedelta(days=pool.lock_days)
        if now < unlock_at:
            raise ValidationError(
                f"Stake {stake_id} is locked until {unlock_at.isoformat()}"
            )

        remaining = self._accrued(stake, pool, now).quantize(
            AMOUNT_QUANTUM, rounding=ROUND_DOWN
        )
        user = await self.user_repo.get_by_id(stake.user_id)
        if remaining > 0 and user is not None and user.is_banned:
            logger.warning(
                "Reward withheld on withdrawal by banned user",
                extra={
                    "stake_id": stake_id,
                    "user_id": stake.user_id,
                    "withheld": str(remaining),
                },
            )
            remaining = Decimal("0")
        if remaining > 0:
            await self._apply_claim(stake, remaining, now)

        if not await self.stake_repo.mark_withdrawn(stake_id, now):
            raise ConcurrentUpdateConflictError(
                f"Stake {stake_id} changed during withdrawal"
            )

        await self.pool_repo.increment(stake.pool_id, total_staked=-stake.amount)
        await self.stats_repo.bump(total_staked=-stake.amount)
        await self._record_ledger(stake, TransactionType.UNSTAKE, stake.amount, now)
        await self.session.refresh(stake)

        logger.info(
            "Stake withdrawn",
            extra={
                "stake_id": stake_id,
                "user_id": stake.user_id,
                "amount": str(stake.amount),
                "final_reward": str(remaining),
            },
        )
        return stake

    async def get_user_stakes(
        self, user_id: int, status: StakeStatus | None = None
    ) -> list[Stake]:
        """Get stakes of a user, optionally filtered by status."""
        return await self.stake_repo.get_by_user(user_id, status)

    async def get_stake_claims(self, stake_id: int) -> list[StakingRewardClaim]:
        """Get claim history of a stake, oldest first."""
        return await self.stake_repo.get_claims(stake_id)

    def _accrued(self, stake: Stake, pool: StakingPool, now: datetime) -> Decimal:
        try:
            snapshot = StakeSnapshot(
                principal=stake.amount,
                staking_date=stake.staking_date,
                apr_percent=pool.apr_percent,
                rewards_claimed=stake.rewards_claimed,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Stake {stake.id} holds invalid data: {e}") from e
        return self.calculator.compute_for_stake(snapshot, now)

    async def _apply_claim(
        self, stake: Stake, amount: Decimal, now: datetime
    ) -> StakingRewardClaim:
        applied = await self.stake_repo.apply_reward_claim(
            stake.id, amount, stake.claim_version, now
        )
        if not applied:
            logger.warning(
                "Staking claim lost a concurrent update",
                extra={"stake_id": stake.id, "amount": str(amount)},
            )
            raise ConcurrentUpdateConflictError(
                f"Stake {stake.id} was updated concurrently, retry the claim"
            )

        claim = await self.stake_repo.add_claim_record(stake, amount, now)
        await self.stats_repo.bump(total_rewards_claimed=amount)
        await self._record_ledger(stake, TransactionType.STAKING_REWARD, amount, now)
        await self.session.refresh(stake)

        logger.info(
            "Staking reward claimed",
            extra={
                "stake_id": stake.id,
                "user_id": stake.user_id,
                "amount": str(amount),
            },
        )
        return claim

    async def _record_ledger(
        self,
        stake: Stake,
        tx_type: TransactionType,
        token_amount: Decimal,
        now: datetime,
    ) -> None:
        await self.transaction_repo.create(
            user_id=stake.user_id,
            type=tx_type.value,
            status=TransactionStatus.CONFIRMED.value,
            amount=Decimal("0"),
            token_amount=token_amount,
            reference_id=stake.id,
            created_at=now,
            confirmed_at=now,
        )
