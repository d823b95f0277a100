"""
Standard type definitions for database models.

Provides consistent types for monetary and percentage fields across all models.
"""

from sqlalchemy import DECIMAL

# Standard money type for amounts, balances, rewards
# Precision: 18 digits total, 8 after decimal point
# Suitable for: payments, token amounts, staked principal, rewards
# Range: up to 9,999,999,999.99999999
MoneyType = DECIMAL(18, 8)

# Token price type
# Precision: 24 digits total, 12 after decimal point
# Suitable for: presale token prices well below one unit of payment currency
PriceType = DECIMAL(24, 12)

# Precise rate percentage type for reward calculations
# Precision: 10 digits total, 4 after decimal point
# Suitable for: staking APR (e.g., 12.5000%)
# Range: 0.0000 to 999999.9999
RatePercentType = DECIMAL(10, 4)
