"""
Domain exceptions.

Error taxonomy for the presale data-access layer. Input errors raised by
the standalone calculators are re-exported so callers can catch every
domain failure through ``PresaleError`` or ``ValueError``.
"""

from decimal import Decimal

from presale_calculator.exceptions import (
    CalculationInputError,
    InvalidScheduleError,
    InvalidStakeError,
)


class PresaleError(Exception):
    """Base class for presale domain errors."""
    pass


class ValidationError(PresaleError, ValueError):
    """Raised when a request violates a business rule."""
    pass


class NotFoundError(PresaleError, LookupError):
    """Raised when a referenced entity does not exist."""

    entity = "Entity"

    def __init__(self, entity_id: object) -> None:
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class UserNotFoundError(NotFoundError):
    entity = "User"


class PresaleNotFoundError(NotFoundError):
    entity = "Presale"


class TransactionNotFoundError(NotFoundError):
    entity = "Transaction"


class StakingPoolNotFoundError(NotFoundError):
    entity = "Staking pool"


class StakeNotFoundError(NotFoundError):
    entity = "Stake"


class VestingScheduleNotFoundError(NotFoundError):
    entity = "Vesting schedule"


class OverclaimAttemptError(PresaleError, ValueError):
    """Raised when a claim exceeds the currently claimable amount."""

    def __init__(self, requested: Decimal, available: Decimal) -> None:
        self.requested = requested
        self.available = available
        super().__init__(
            f"Requested claim {requested} exceeds claimable amount {available}"
        )


class ConcurrentUpdateConflictError(PresaleError):
    """Raised when an atomic counter update lost a race; safe to retry."""
    pass


class ReferralCodeExhaustedError(PresaleError):
    """Raised when no unique referral code could be generated."""
    pass


# Errors the caller may resolve by re-running read-compute-write
RETRYABLE = (
    ConcurrentUpdateConflictError,
)


def is_retryable(exc: Exception) -> bool:
    """
    Check if the failed operation can be retried as-is.

    Args:
        exc: Exception to check

    Returns:
        True if exception is retryable
    """
    return isinstance(exc, RETRYABLE)


__all__ = [
    "CalculationInputError",
    "ConcurrentUpdateConflictError",
    "InvalidScheduleError",
    "InvalidStakeError",
    "NotFoundError",
    "OverclaimAttemptError",
    "PresaleError",
    "PresaleNotFoundError",
    "ReferralCodeExhaustedError",
    "StakeNotFoundError",
    "StakingPoolNotFoundError",
    "TransactionNotFoundError",
    "UserNotFoundError",
    "ValidationError",
    "VestingScheduleNotFoundError",
    "is_retryable",
]
