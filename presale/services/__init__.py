"""
Services.

Business operations over repositories. Mutating operations commit on
success and roll back on any exception.
"""

from presale.services.presale_service import PresaleService
from presale.services.referral_service import ReferralService
from presale.services.staking_service import StakingService
from presale.services.stats_service import StatsService
from presale.services.user_service import UserService
from presale.services.vesting_service import VestingService

__all__ = [
    "PresaleService",
    "ReferralService",
    "StakingService",
    "StatsService",
    "UserService",
    "VestingService",
]
