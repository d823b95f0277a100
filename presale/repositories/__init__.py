"""
Repositories.

Data access layer over SQLAlchemy async sessions.
"""

from presale.repositories.base import BaseRepository
from presale.repositories.platform_stats_repository import PlatformStatsRepository
from presale.repositories.presale_repository import PresaleRepository
from presale.repositories.referral_repository import ReferralRepository
from presale.repositories.staking_repository import (
    StakeRepository,
    StakingPoolRepository,
)
from presale.repositories.transaction_repository import TransactionRepository
from presale.repositories.user_repository import UserRepository
from presale.repositories.vesting_repository import VestingRepository

__all__ = [
    "BaseRepository",
    "PlatformStatsRepository",
    "PresaleRepository",
    "ReferralRepository",
    "StakeRepository",
    "StakingPoolRepository",
    "TransactionRepository",
    "UserRepository",
    "VestingRepository",
]
