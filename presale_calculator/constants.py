"""
Constants shared by the reward and vesting calculators.
"""

from datetime import timedelta
from decimal import Decimal


# Simple-interest basis: fixed 365-day year regardless of leap years
DAYS_PER_YEAR = Decimal("365")

PERCENT = Decimal("100")

ZERO = Decimal("0")

ONE_DAY = timedelta(days=1)

# Resolution used for exact linear vesting progress
ONE_MICROSECOND = timedelta(microseconds=1)
