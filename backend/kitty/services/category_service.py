"""
services/category_service.py — Expense category reference data.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.kitty.errors import ErrorCode, NotFoundError
from backend.kitty.models.category import DEFAULT_CATEGORY_NAMES, ExpenseCategory

logger = logging.getLogger(__name__)


def get_categories(session: Session) -> list[ExpenseCategory]:
    """Returns every category, ordered by id."""
    stmt = select(ExpenseCategory).order_by(ExpenseCategory.id.asc())
    return list(session.execute(stmt).scalars().all())


def get_category_or_404(category_id: int, session: Session) -> ExpenseCategory:
    category = session.get(ExpenseCategory, category_id)
    if category is None:
        raise NotFoundError(
            ErrorCode.CATEGORY_NOT_FOUND,
            f"Category {category_id} does not exist.",
            field="category_id",
        )
    return category


def list_categories(session: Session) -> list[dict]:
    return [{"id": c.id, "name": c.name} for c in get_categories(session)]


def ensure_default_categories(session: Session) -> int:
    """
    Inserts any default category that is missing. Idempotent.

    Returns the number of rows added. Flushes only; the caller commits.
    """
    existing = set(session.execute(select(ExpenseCategory.name)).scalars().all())
    missing = [name for name in DEFAULT_CATEGORY_NAMES if name not in existing]

    for name in missing:
        session.add(ExpenseCategory(name=name))
    if missing:
        session.flush()
        logger.info("Seeded %d default expense categories", len(missing))

    return len(missing)
