"""
Model enums.

String enums stored as their values in VARCHAR columns.
"""

from enum import StrEnum


class PresaleStatus(StrEnum):
    """Presale lifecycle status."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"
    CANCELLED = "cancelled"


class TransactionType(StrEnum):
    """Ledger entry type."""

    PURCHASE = "purchase"
    STAKE = "stake"
    UNSTAKE = "unstake"
    STAKING_REWARD = "staking_reward"
    VESTING_CLAIM = "vesting_claim"
    REFERRAL_BONUS = "referral_bonus"


class TransactionStatus(StrEnum):
    """Ledger entry status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class StakeStatus(StrEnum):
    """Stake lifecycle status."""

    ACTIVE = "active"
    WITHDRAWN = "withdrawn"
