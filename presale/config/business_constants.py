"""
Business constants.

Single source of truth for referral program and amount precision.
"""

from decimal import Decimal


# Amounts are stored as DECIMAL(18, 8)
AMOUNT_QUANTUM = Decimal("0.00000001")

# Referral program: commission on confirmed purchases, per level
REFERRAL_DEPTH = 3
REFERRAL_RATES = {
    1: Decimal("0.05"),  # 5% for direct referrals
    2: Decimal("0.02"),  # 2% for level 2
    3: Decimal("0.01"),  # 1% for level 3
}

# Referral code alphabet (no 0/O/1/I to avoid ambiguity)
REFERRAL_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

# Single row holding platform-wide counters
PLATFORM_STATS_ROW_ID = 1
