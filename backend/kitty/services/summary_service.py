"""
services/summary_service.py — Group settlement and category summaries.

Loads a snapshot of members, expenses and categories for one group and
hands it to settlement_engine.py. No arithmetic happens here.

Both summaries are recomputed on every request and never cached. Two
concurrent calls simply see two valid point-in-time snapshots.

Layer rules:
  - No Flask imports. Receives group_id, caller_id and a Session.
  - Returns plain dicts with amounts rendered as 2-decimal strings.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.kitty.models.expense import Expense
from backend.kitty.services import settlement_engine
from backend.kitty.services.category_service import get_categories
from backend.kitty.services.group_service import get_group_or_404, get_members, require_member


def _get_expense_rows(group_id: int, session: Session) -> list[Expense]:
    stmt = select(Expense).where(Expense.group_id == group_id)
    return list(session.execute(stmt).scalars().all())


def get_group_summary(group_id: int, caller_id: int, session: Session) -> dict:
    """
    Builds the settlement summary for GET /groups/:id/summary.

    Raises:
      NotFoundError(GROUP_NOT_FOUND)     — group does not exist
      PermissionDeniedError(FORBIDDEN)   — caller is not a member

    Returns:
      {"total": "30.00", "equal_share": "15.00",
       "members": [{"id", "username", "total_paid", "equal_share", "balance"}, ...]}
    """
    get_group_or_404(group_id, session)
    require_member(group_id, caller_id, session)

    summary = settlement_engine.compute_balances(
        members=get_members(group_id, session),
        expenses=_get_expense_rows(group_id, session),
    )
    return {"group_id": group_id, **summary.to_dict()}


def get_category_summary(group_id: int, caller_id: int, session: Session) -> list[dict]:
    """
    Builds the per-category totals for GET /groups/:id/categories.

    Every known category is listed, unused ones with "0.00".
    """
    get_group_or_404(group_id, session)
    require_member(group_id, caller_id, session)

    totals = settlement_engine.compute_category_totals(
        categories=get_categories(session),
        expenses=_get_expense_rows(group_id, session),
    )
    return [t.to_dict() for t in totals]
