"""
Token Presale Reward and Vesting Calculator.

Standalone package for staking reward accrual and vesting unlocks.

Example:
    >>> from datetime import UTC, datetime, timedelta
    >>> from decimal import Decimal
    >>> from presale_calculator import StakingRewardCalculator
    >>>
    >>> calc = StakingRewardCalculator()
    >>> start = datetime(2024, 1, 1, tzinfo=UTC)
    >>> reward = calc.compute_accrued_reward(
    ...     principal=Decimal("1000"),
    ...     staking_date=start,
    ...     apr_percent=Decimal("36.5"),
    ...     rewards_claimed=Decimal("0"),
    ...     now=start + timedelta(days=30),
    ... )
    >>> print(f"Accrued: {reward}")
    Accrued: 30.000
"""

from presale_calculator.constants import DAYS_PER_YEAR
from presale_calculator.core.models import StakeSnapshot, VestingSnapshot
from presale_calculator.core.staking import StakingRewardCalculator
from presale_calculator.core.vesting import VestingAmountCalculator
from presale_calculator.exceptions import (
    CalculationInputError,
    InvalidScheduleError,
    InvalidStakeError,
)


__version__ = "1.0.0"
__all__ = [
    # Core
    "StakingRewardCalculator",
    "VestingAmountCalculator",
    # Models
    "StakeSnapshot",
    "VestingSnapshot",
    # Errors
    "CalculationInputError",
    "InvalidScheduleError",
    "InvalidStakeError",
    # Constants
    "DAYS_PER_YEAR",
]
