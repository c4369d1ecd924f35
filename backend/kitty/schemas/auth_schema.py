"""
schemas/auth_schema.py — Marshmallow schemas for authentication endpoints.

Shape rules only. Username/email uniqueness needs a DB lookup and is
checked in auth_service.py.
"""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates


class RegisterSchema(Schema):
    """
    POST /auth/register

      username : 3–50 chars, letters, digits and underscore
      email    : valid email, max 100 chars
      password : min 8 chars, at least one letter and one digit
    """

    username = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=3,
                max=50,
                error="Username must be between 3 and 50 characters.",
            ),
            validate.Regexp(
                r"^[a-zA-Z0-9_]+$",
                error="Username may only contain letters, numbers, and underscores.",
            ),
        ],
    )

    email = fields.Email(
        required=True,
        validate=validate.Length(max=100),
    )

    password = fields.Str(required=True, load_only=True)

    @validates("password")
    def validate_password_strength(self, value: str, **kwargs) -> None:
        if len(value) < 8:
            raise ValidationError("Password must be at least 8 characters long.")
        if not any(c.isalpha() for c in value):
            raise ValidationError("Password must contain at least one letter.")
        if not any(c.isdigit() for c in value):
            raise ValidationError("Password must contain at least one digit.")


class LoginSchema(Schema):
    """POST /auth/login — credential correctness is checked in auth_service.py."""

    username = fields.Str(required=True)
    password = fields.Str(required=True, load_only=True)
