"""
Vesting amount calculator.

Linear vesting with an optional cliff. Progress is computed on integer
microseconds so the unlocked amount stays an exact decimal.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from presale_calculator.constants import ONE_MICROSECOND, ZERO
from presale_calculator.exceptions import InvalidScheduleError
from presale_calculator.utils.conversion import as_utc, to_decimal


if TYPE_CHECKING:
    from presale_calculator.core.models import VestingSnapshot


class VestingAmountCalculator:
    """
    Unlocked-amount calculator for vesting schedules.

    Regions, evaluated in order:
    1. before start: nothing unlocked
    2. before cliff (if any): nothing unlocked
    3. at or after end: everything unlocked
    4. otherwise: total * elapsed / duration
    """

    def validate_schedule(
        self,
        total_amount: Decimal,
        start_date: datetime,
        end_date: datetime,
        cliff_date: datetime | None = None,
        claimed_amount: Decimal = ZERO,
        strict_cliff: bool = False,
    ) -> None:
        """
        Check schedule invariants.

        A cliff after ``end_date`` is tolerated unless ``strict_cliff``
        is set; schedule creation uses the strict form.

        Args:
            total_amount: Total granted amount
            start_date: Vesting start
            end_date: Vesting end
            cliff_date: Optional cliff
            claimed_amount: Amount already claimed
            strict_cliff: Also require cliff_date <= end_date

        Raises:
            InvalidScheduleError: If any invariant is violated
        """
        start = as_utc(start_date)
        end = as_utc(end_date)

        if end <= start:
            raise InvalidScheduleError(
                f"end_date ({end.isoformat()}) must be after "
                f"start_date ({start.isoformat()})"
            )
        if total_amount < 0:
            raise InvalidScheduleError(
                f"total_amount must be >= 0, got {total_amount}"
            )
        if claimed_amount < 0:
            raise InvalidScheduleError(
                f"claimed_amount must be >= 0, got {claimed_amount}"
            )
        if claimed_amount > total_amount:
            raise InvalidScheduleError(
                f"claimed_amount ({claimed_amount}) exceeds "
                f"total_amount ({total_amount})"
            )
        if cliff_date is not None:
            cliff = as_utc(cliff_date)
            if cliff < start:
                raise InvalidScheduleError("cliff_date is before start_date")
            if strict_cliff and cliff > end:
                raise InvalidScheduleError("cliff_date is after end_date")

    def compute_unlocked(
        self,
        total_amount: Decimal,
        start_date: datetime,
        end_date: datetime,
        now: datetime,
        cliff_date: datetime | None = None,
    ) -> Decimal:
        """
        Calculate amount unlocked by time, before subtracting claims.

        Assumes the schedule has been validated.

        Args:
            total_amount: Total granted amount
            start_date: Vesting start
            end_date: Vesting end
            now: Current time
            cliff_date: Optional cliff

        Returns:
            Unlocked amount in [0, total_amount]
        """
        start = as_utc(start_date)
        end = as_utc(end_date)
        now = as_utc(now)

        if now < start:
            return ZERO
        if cliff_date is not None and now < as_utc(cliff_date):
            return ZERO
        if now >= end:
            return total_amount

        elapsed = (now - start) // ONE_MICROSECOND
        duration = (end - start) // ONE_MICROSECOND
        return total_amount * Decimal(elapsed) / Decimal(duration)

    def compute_unlocked_unclaimed(
        self,
        total_amount: Decimal | int | str,
        start_date: datetime,
        cliff_date: datetime | None,
        end_date: datetime,
        claimed_amount: Decimal | int | str,
        now: datetime,
    ) -> Decimal:
        """
        Calculate currently unlocked, unclaimed amount of a grant.

        Formula: max(0, unlocked(now) - claimed_amount)

        Args:
            total_amount: Total granted amount
            start_date: Vesting start
            cliff_date: Optional cliff (None for no cliff)
            end_date: Vesting end (must be after start)
            claimed_amount: Amount already claimed
            now: Current time

        Returns:
            Claimable amount, never negative

        Raises:
            InvalidScheduleError: If the schedule is malformed

        Example:
            >>> calc = VestingAmountCalculator()
            >>> calc.compute_unlocked_unclaimed(
            ...     Decimal("1200"), datetime(2024, 1, 1), None,
            ...     datetime(2024, 12, 26), Decimal("0"), datetime(2024, 6, 29),
            ... )
            Decimal('600')
        """
        total_amount = to_decimal(total_amount, "total_amount", InvalidScheduleError)
        claimed_amount = to_decimal(
            claimed_amount, "claimed_amount", InvalidScheduleError
        )

        self.validate_schedule(
            total_amount=total_amount,
            start_date=start_date,
            end_date=end_date,
            cliff_date=cliff_date,
            claimed_amount=claimed_amount,
        )

        unlocked = self.compute_unlocked(
            total_amount=total_amount,
            start_date=start_date,
            end_date=end_date,
            now=now,
            cliff_date=cliff_date,
        )
        return max(unlocked - claimed_amount, ZERO)

    def compute_for_schedule(
        self, snapshot: "VestingSnapshot", now: datetime
    ) -> Decimal:
        """
        Calculate claimable amount from a schedule snapshot.

        Args:
            snapshot: Vesting schedule snapshot
            now: Current time

        Returns:
            Claimable amount
        """
        return self.compute_unlocked_unclaimed(
            total_amount=snapshot.total_amount,
            start_date=snapshot.start_date,
            cliff_date=snapshot.cliff_date,
            end_date=snapshot.end_date,
            claimed_amount=snapshot.claimed_amount,
            now=now,
        )
