"""Core calculation logic."""

from presale_calculator.core.models import StakeSnapshot, VestingSnapshot
from presale_calculator.core.staking import StakingRewardCalculator
from presale_calculator.core.vesting import VestingAmountCalculator


__all__ = [
    "StakingRewardCalculator",
    "VestingAmountCalculator",
    "StakeSnapshot",
    "VestingSnapshot",
]
