"""
Staking reward calculator.

Pure, deterministic simple-interest accrual for a single stake. No
database, ORM or clock access: the current time is always passed in.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from presale_calculator.constants import DAYS_PER_YEAR, ONE_DAY, PERCENT, ZERO
from presale_calculator.exceptions import InvalidStakeError
from presale_calculator.utils.conversion import as_utc, to_decimal


if TYPE_CHECKING:
    from presale_calculator.core.models import StakeSnapshot


class StakingRewardCalculator:
    """
    Accrued-reward calculator for staking pools.

    Rewards accrue per completed day at ``apr_percent / 365 / 100`` of
    the principal, without compounding and without an upper cap.
    """

    def elapsed_days(self, staking_date: datetime, now: datetime) -> int:
        """
        Count whole days elapsed since the stake was created.

        Partial days are floored, so a stake earns nothing until its
        first full day completes.

        Args:
            staking_date: When the stake was created
            now: Current time

        Returns:
            Whole days elapsed (0 when now is at or before staking_date)

        Example:
            >>> calc = StakingRewardCalculator()
            >>> calc.elapsed_days(datetime(2024, 1, 1), datetime(2024, 1, 3, 23))
            2
        """
        days = (as_utc(now) - as_utc(staking_date)) // ONE_DAY
        return max(days, 0)

    def daily_rate(self, apr_percent: Decimal) -> Decimal:
        """
        Convert an APR percentage into a daily fractional rate.

        Formula: apr_percent / 365 / 100

        Args:
            apr_percent: Annual rate in percent (e.g. 12 = 12%)

        Returns:
            Daily rate as a fraction
        """
        return apr_percent / DAYS_PER_YEAR / PERCENT

    def total_accrued(
        self,
        principal: Decimal,
        staking_date: datetime,
        apr_percent: Decimal,
        now: datetime,
    ) -> Decimal:
        """
        Calculate total reward earned since inception.

        Formula: principal * daily_rate * elapsed_days

        Args:
            principal: Staked amount
            staking_date: When the stake was created
            apr_percent: Pool APR in percent
            now: Current time

        Returns:
            Reward earned to date, before subtracting prior claims
        """
        days = self.elapsed_days(staking_date, now)
        if days <= 0:
            return ZERO
        return principal * self.daily_rate(apr_percent) * days

    def compute_accrued_reward(
        self,
        principal: Decimal | int | str,
        staking_date: datetime,
        apr_percent: Decimal | int | str,
        rewards_claimed: Decimal | int | str,
        now: datetime,
    ) -> Decimal:
        """
        Calculate currently accrued, unclaimed reward for a stake.

        Formula: max(0, principal * apr / 365 / 100 * days - rewards_claimed)

        Args:
            principal: Staked amount (> 0)
            staking_date: When the stake was created
            apr_percent: Pool APR in percent (>= 0)
            rewards_claimed: Lifetime rewards already claimed (>= 0)
            now: Current time

        Returns:
            Unclaimed reward, never negative

        Raises:
            InvalidStakeError: If any input violates the stake invariants

        Example:
            >>> calc = StakingRewardCalculator()
            >>> calc.compute_accrued_reward(
            ...     Decimal("1000"), datetime(2024, 1, 1), Decimal("36.5"),
            ...     Decimal("0"), datetime(2024, 1, 11),
            ... )
            Decimal('10.000')
        """
        principal = to_decimal(principal, "principal", InvalidStakeError)
        apr_percent = to_decimal(apr_percent, "apr_percent", InvalidStakeError)
        rewards_claimed = to_decimal(
            rewards_claimed, "rewards_claimed", InvalidStakeError
        )

        if principal <= 0:
            raise InvalidStakeError(f"principal must be positive, got {principal}")
        if apr_percent < 0:
            raise InvalidStakeError(f"apr_percent must be >= 0, got {apr_percent}")
        if rewards_claimed < 0:
            raise InvalidStakeError(
                f"rewards_claimed must be >= 0, got {rewards_claimed}"
            )

        accrued = self.total_accrued(principal, staking_date, apr_percent, now)
        return max(accrued - rewards_claimed, ZERO)

    def compute_for_stake(
        self, snapshot: "StakeSnapshot", now: datetime
    ) -> Decimal:
        """
        Calculate unclaimed reward from a stake snapshot.

        Args:
            snapshot: Stake snapshot
            now: Current time

        Returns:
            Unclaimed reward
        """
        return self.compute_accrued_reward(
            principal=snapshot.principal,
            staking_date=snapshot.staking_date,
            apr_percent=snapshot.apr_percent,
            rewards_claimed=snapshot.rewards_claimed,
            now=now,
        )
