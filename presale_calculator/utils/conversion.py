"""
Input coercion helpers.

Amounts must arrive as exact decimals (``Decimal``, ``int`` or a decimal
string); binary floats are refused so that rounding drift never enters
a financial sum.
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation


def to_decimal(
    value: Decimal | int | str,
    field: str,
    error_cls: type[ValueError] = ValueError,
) -> Decimal:
    """
    Convert an amount to Decimal.

    Args:
        value: Decimal, int or decimal string
        field: Field name used in the error message
        error_cls: Exception class raised on bad input

    Returns:
        Decimal value

    Raises:
        error_cls: If value is a float, bool, non-finite or unparsable

    Example:
        >>> to_decimal("12.5", "apr_percent")
        Decimal('12.5')
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or isinstance(value, float):
        raise error_cls(
            f"{field} must be an exact decimal, got {type(value).__name__}"
        )
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation as e:
            raise error_cls(f"{field} is not a valid decimal: {value!r}") from e
    else:
        raise error_cls(
            f"{field} must be an exact decimal, got {type(value).__name__}"
        )

    if not result.is_finite():
        raise error_cls(f"{field} must be finite, got {result}")
    return result


def reject_float(value: object) -> object:
    """Pass non-float values through; pydantic before-validator helper."""
    if isinstance(value, float):
        raise ValueError("binary floats are not accepted for amounts, use Decimal or str")
    return value


def as_utc(value: datetime) -> datetime:
    """
    Return a timezone-aware datetime, treating naive values as UTC.

    Args:
        value: Datetime, naive or aware

    Returns:
        Aware datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
