"""
Calculator exceptions.

Raised only on malformed input; the calculators never raise for
legitimate edge cases such as a stake that has not yet earned anything.
"""


class CalculationInputError(ValueError):
    """Base class for malformed calculator input."""
    pass


class InvalidStakeError(CalculationInputError):
    """Stake snapshot violates its invariants (principal, APR, claimed)."""
    pass


class InvalidScheduleError(CalculationInputError):
    """Vesting schedule violates its invariants (dates, amounts, cliff)."""
    pass
