"""Utility functions for calculator."""

from presale_calculator.utils.conversion import (
    as_utc,
    reject_float,
    to_decimal,
)


__all__ = [
    "as_utc",
    "reject_float",
    "to_decimal",
]
