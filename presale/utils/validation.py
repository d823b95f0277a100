"""Amount validation utilities."""

from decimal import Decimal

from presale.config.business_constants import AMOUNT_QUANTUM
from presale.utils.exceptions import ValidationError
from presale_calculator.utils.conversion import to_decimal


def validate_amount(
    amount: Decimal | str,
    field: str = "amount",
    error_cls: type[Exception] = ValidationError,
) -> Decimal:
    """
    Parse and validate a user-supplied money amount.

    Floats are rejected, the amount must be positive and must not carry
    more than 8 decimal places.

    Args:
        amount: Decimal or decimal string
        field: Field name used in error messages
        error_cls: Exception class raised on bad input

    Returns:
        Validated amount

    Raises:
        error_cls: If the amount is not acceptable
    """
    amount = to_decimal(amount, field, error_cls)

    if amount <= 0:
        raise error_cls(f"{field} must be positive, got {amount}")

    if amount != amount.quantize(AMOUNT_QUANTUM):
        raise error_cls(f"{field} {amount} has more than 8 decimal places")

    return amount
