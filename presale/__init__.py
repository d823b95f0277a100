"""
Token presale data-access layer.

SQLAlchemy models, repositories and services for users, presales, the
transaction ledger, referrals, staking and vesting. Reward and vesting
math lives in the standalone ``presale_calculator`` package.
"""

__version__ = "1.0.0"
