"""
schemas/_validators.py — Field validators shared by several schemas.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import ValidationError

from backend.kitty.errors import ErrorCode

# NUMERIC(10, 2) holds at most 8 integer digits.
MAX_AMOUNT = Decimal("99999999.99")


def validate_non_empty_after_trim(value: str) -> None:
    """Rejects strings that are blank or whitespace only."""
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


def validate_expense_amount(value: Decimal) -> None:
    """
    Expense amounts are non-negative with at most 2 decimal places.
    More precision is rejected, never rounded.
    """
    if value < Decimal("0"):
        raise ValidationError("Amount must not be negative.")
    if value > MAX_AMOUNT:
        raise ValidationError(f"Amount must not exceed {MAX_AMOUNT}.")

    # exponent is the negated number of decimal places: "10.123" → -3
    if value.as_tuple().exponent < -2:
        raise ValidationError(ErrorCode.INVALID_AMOUNT_PRECISION)
