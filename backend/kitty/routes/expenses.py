"""
routes/expenses.py — Expense route handlers.

Endpoints (url_prefix=/api/v1/groups):
  POST   /groups/:id/expenses   → 201  record an expense paid by the caller
  GET    /groups/:id/expenses   → 200  list the group's expenses, newest first
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from backend.kitty.extensions import db
from backend.kitty.middleware.auth_middleware import require_auth
from backend.kitty.models.expense import Expense
from backend.kitty.schemas.expense_schema import CreateExpenseSchema
from backend.kitty.services import expense_service
from backend.kitty.services.settlement_engine import format_amount

expenses_bp = Blueprint("expenses", __name__)


def _serialize_expense(expense: Expense) -> dict:
    """Converts an Expense ORM object to a plain dict. Amount as a 2dp string."""
    return {
        "id": expense.id,
        "group_id": expense.group_id,
        "amount": format_amount(expense.amount),
        "description": expense.description,
        "category_id": expense.category_id,
        "category_name": expense.category.name,
        "paid_by_user_id": expense.paid_by_user_id,
        "paid_by_username": expense.payer.username,
        "created_at": expense.created_at.isoformat(),
    }


@expenses_bp.route("/<int:group_id>/expenses", methods=["POST"])
@require_auth
def create_expense(group_id: int):
    data = CreateExpenseSchema().load(request.get_json(force=True) or {})
    expense = expense_service.create_expense(
        group_id=group_id,
        caller_id=g.user_id,
        data=data,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": _serialize_expense(expense), "warnings": []}), 201


@expenses_bp.route("/<int:group_id>/expenses", methods=["GET"])
@require_auth
def list_expenses(group_id: int):
    expenses = expense_service.list_expenses(
        group_id=group_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({
        "data": [_serialize_expense(e) for e in expenses],
        "warnings": [],
    }), 200
