"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from presale.models.base import Base
from presale.models.enums import (
    PresaleStatus,
    StakeStatus,
    TransactionStatus,
    TransactionType,
)
from presale.models.platform_stats import PlatformStats
from presale.models.presale import Presale
from presale.models.referral import Referral, ReferralEarning
from presale.models.stake import Stake, StakingRewardClaim
from presale.models.staking_pool import StakingPool
from presale.models.transaction import Transaction
from presale.models.user import User
from presale.models.vesting_schedule import VestingSchedule

__all__ = [
    # Base
    "Base",
    # Enums
    "PresaleStatus",
    "StakeStatus",
    "TransactionStatus",
    "TransactionType",
    # Core Models
    "User",
    "Presale",
    "Transaction",
    # Referral Models
    "Referral",
    "ReferralEarning",
    # Staking Models
    "StakingPool",
    "Stake",
    "StakingRewardClaim",
    # Vesting Models
    "VestingSchedule",
    # System Models
    "PlatformStats",
]
