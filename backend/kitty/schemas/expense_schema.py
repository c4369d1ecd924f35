"""
schemas/expense_schema.py — Marshmallow schema for recording an expense.

Shape rules: amount precision and range, category id type, description
length. Membership and category existence are checked in expense_service.py.
The payer is always the authenticated caller and is never read from the body.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from backend.kitty.schemas._validators import validate_expense_amount


class CreateExpenseSchema(Schema):
    """POST /groups/:id/expenses"""

    # Strings ("12.50") are preferred; JSON numbers are accepted too.
    amount = fields.Decimal(
        required=True,
        validate=validate_expense_amount,
    )

    category_id = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(min=1, error="category_id must be a positive integer."),
    )

    description = fields.Str(
        load_default=None,
        allow_none=True,
        validate=validate.Length(max=1000),
    )
