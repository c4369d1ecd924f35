"""
services/expense_service.py — Expense business logic.

Authorization rules:
  - Create: caller must be a group member; the caller is always the payer.
  - List:   caller must be a group member.

Expenses are immutable once recorded. There is no edit or delete path.
Every expense is shared equally by all current members at query time;
see settlement_engine.py.

Layer rules:
  - No Flask imports. No current_app, request, g, or HTTP knowledge.
  - Receives plain ints and dicts; returns ORM objects or raises AppError.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.kitty.models.expense import Expense
from backend.kitty.services.category_service import get_category_or_404
from backend.kitty.services.group_service import get_group_or_404, require_member

logger = logging.getLogger(__name__)


def get_group_expenses(group_id: int, session: Session) -> list[Expense]:
    """Returns every expense of a group, newest first."""
    stmt = (
        select(Expense)
        .where(Expense.group_id == group_id)
        .order_by(Expense.created_at.desc(), Expense.id.desc())
    )
    return list(session.execute(stmt).scalars().all())


def create_expense(
        group_id: int,
        caller_id: int,
        data: dict,
        session: Session,
) -> Expense:
    """
    Records an expense paid by the caller.

    Args:
        data: Validated CreateExpenseSchema output
              ({"amount": Decimal, "category_id": int, "description": str | None}).

    Raises:
      NotFoundError(GROUP_NOT_FOUND)       — group does not exist
      PermissionDeniedError(FORBIDDEN)     — caller is not a member
      NotFoundError(CATEGORY_NOT_FOUND)    — category_id is unknown
    """
    get_group_or_404(group_id, session)
    require_member(group_id, caller_id, session)
    get_category_or_404(data["category_id"], session)

    expense = Expense(
        group_id=group_id,
        amount=data["amount"],
        description=data.get("description"),
        category_id=data["category_id"],
        paid_by_user_id=caller_id,
    )
    session.add(expense)
    session.flush()

    logger.info(
        "User %s recorded expense %s of %s in group %s",
        caller_id, expense.id, expense.amount, group_id,
    )
    return expense


def list_expenses(group_id: int, caller_id: int, session: Session) -> list[Expense]:
    """Returns the group's expenses, newest first. Caller must be a member."""
    get_group_or_404(group_id, session)
    require_member(group_id, caller_id, session)
    return get_group_expenses(group_id, session)
