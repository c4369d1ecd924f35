"""
schemas/group_schema.py — Marshmallow schemas for group and invite endpoints.

Shape rules only. Membership, user existence and invite uniqueness
are decided by invite_lifecycle.py / invite_service.py.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from backend.kitty.schemas._validators import validate_non_empty_after_trim


class CreateGroupSchema(Schema):
    """POST /groups — name is non-empty after trim, max 100 chars."""

    name = fields.Str(
        required=True,
        validate=[
            validate.Length(
                min=1,
                max=100,
                error="Group name must be between 1 and 100 characters.",
            ),
            validate_non_empty_after_trim,
        ],
    )


class CreateInviteSchema(Schema):
    """
    POST /groups/:id/invites

    The receiver is addressed by username. The sender is always the
    authenticated caller and is never read from the body.
    """

    receiver_username = fields.Str(
        required=True,
        validate=[
            validate.Length(min=1, max=50),
            validate_non_empty_after_trim,
        ],
    )

    description = fields.Str(
        load_default=None,
        allow_none=True,
        validate=validate.Length(
            max=140,
            error="Description must be at most 140 characters.",
        ),
    )
