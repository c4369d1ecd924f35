"""
tests/unit/test_validation_schemas.py — Unit tests for all marshmallow schemas.

What this file proves:
  - Every schema accepts valid input without raising
  - Every schema rejects invalid input with a ValidationError on the right field
  - Amount precision errors carry the registered INVALID_AMOUNT_PRECISION code
  - Membership, user existence and invite uniqueness are NOT tested here;
    they belong to the services

No database, no Flask application context: schemas inherit from
marshmallow.Schema directly and never touch the DB.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from marshmallow import ValidationError

from backend.kitty.errors import ErrorCode
from backend.kitty.schemas.auth_schema import LoginSchema, RegisterSchema
from backend.kitty.schemas.expense_schema import CreateExpenseSchema
from backend.kitty.schemas.group_schema import CreateGroupSchema, CreateInviteSchema


# ═══════════════════════════════════════════════════════════════════════════
# RegisterSchema / LoginSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestRegisterSchema:

    def _load(self, data: dict):
        return RegisterSchema().load(data)

    def test_valid_payload(self):
        result = self._load({
            "username": "alice_99",
            "email": "alice@example.com",
            "password": "Secure12",
        })
        assert result["username"] == "alice_99"
        assert result["email"] == "alice@example.com"

    @pytest.mark.parametrize("username", ["ab", "a" * 51, "alice!", "alice smith"])
    def test_bad_username_raises(self, username):
        with pytest.raises(ValidationError) as exc:
            self._load({"username": username, "email": "a@b.com", "password": "Secure12"})
        assert "username" in exc.value.messages

    def test_username_boundaries_pass(self):
        assert self._load({"username": "abc", "email": "a@b.com", "password": "Secure12"})
        assert self._load({"username": "a" * 50, "email": "a@b.com", "password": "Secure12"})

    def test_invalid_email_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load({"username": "alice", "email": "notanemail", "password": "Secure12"})
        assert "email" in exc.value.messages

    @pytest.mark.parametrize("password", ["Ab1", "12345678", "password"])
    def test_weak_password_raises(self, password):
        with pytest.raises(ValidationError) as exc:
            self._load({"username": "alice", "email": "a@b.com", "password": password})
        assert "password" in exc.value.messages

    def test_missing_fields_reported(self):
        with pytest.raises(ValidationError) as exc:
            self._load({})
        assert set(exc.value.messages) == {"username", "email", "password"}


class TestLoginSchema:

    def test_valid_payload(self):
        result = LoginSchema().load({"username": "alice", "password": "whatever"})
        assert result == {"username": "alice", "password": "whatever"}

    def test_missing_password_raises(self):
        with pytest.raises(ValidationError) as exc:
            LoginSchema().load({"username": "alice"})
        assert "password" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# CreateGroupSchema / CreateInviteSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestCreateGroupSchema:

    def test_valid_name(self):
        assert CreateGroupSchema().load({"name": "Flat 4B"}) == {"name": "Flat 4B"}

    @pytest.mark.parametrize("name", ["", "   ", "x" * 101])
    def test_bad_name_raises(self, name):
        with pytest.raises(ValidationError) as exc:
            CreateGroupSchema().load({"name": name})
        assert "name" in exc.value.messages


class TestCreateInviteSchema:

    def test_description_defaults_to_none(self):
        result = CreateInviteSchema().load({"receiver_username": "bob"})
        assert result == {"receiver_username": "bob", "description": None}

    def test_description_at_limit_passes(self):
        result = CreateInviteSchema().load({
            "receiver_username": "bob",
            "description": "d" * 140,
        })
        assert len(result["description"]) == 140

    def test_description_too_long_raises(self):
        with pytest.raises(ValidationError) as exc:
            CreateInviteSchema().load({"receiver_username": "bob", "description": "d" * 141})
        assert "description" in exc.value.messages

    @pytest.mark.parametrize("payload", [{}, {"receiver_username": "  "}])
    def test_receiver_required_and_non_blank(self, payload):
        with pytest.raises(ValidationError) as exc:
            CreateInviteSchema().load(payload)
        assert "receiver_username" in exc.value.messages

    def test_sender_in_body_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            CreateInviteSchema().load({"receiver_username": "bob", "sender_id": 1})
        assert "sender_id" in exc.value.messages


# ═══════════════════════════════════════════════════════════════════════════
# CreateExpenseSchema
# ═══════════════════════════════════════════════════════════════════════════

class TestCreateExpenseSchema:

    def _load(self, **fields):
        data = {"amount": "30.00", "category_id": 1}
        data.update(fields)
        return CreateExpenseSchema().load(data)

    def test_amount_is_decimal(self):
        result = self._load()
        assert result["amount"] == Decimal("30.00")
        assert isinstance(result["amount"], Decimal)
        assert result["description"] is None

    @pytest.mark.parametrize("amount", ["0", "0.00", "0.01", "99999999.99"])
    def test_boundary_amounts_pass(self, amount):
        assert self._load(amount=amount)["amount"] == Decimal(amount)

    def test_negative_amount_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(amount="-0.01")
        assert "amount" in exc.value.messages

    def test_amount_over_max_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(amount="100000000.00")
        assert "amount" in exc.value.messages

    def test_three_decimal_places_uses_precision_code(self):
        with pytest.raises(ValidationError) as exc:
            self._load(amount="10.123")
        assert exc.value.messages["amount"] == [ErrorCode.INVALID_AMOUNT_PRECISION]

    def test_non_numeric_amount_raises(self):
        with pytest.raises(ValidationError) as exc:
            self._load(amount="ten")
        assert "amount" in exc.value.messages

    @pytest.mark.parametrize("category_id", [0, -1, "1", 1.5])
    def test_bad_category_id_raises(self, category_id):
        with pytest.raises(ValidationError) as exc:
            self._load(category_id=category_id)
        assert "category_id" in exc.value.messages

    def test_payer_in_body_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            self._load(paid_by_user_id=2)
        assert "paid_by_user_id" in exc.value.messages
