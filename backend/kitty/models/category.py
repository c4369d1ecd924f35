"""
models/category.py — Expense category reference table.

Static reference data. Rows are seeded by migration 001 and by
category_service.ensure_default_categories(); nothing in the API mutates them.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.kitty.extensions import db


# Seed order is also the id order on a fresh database.
DEFAULT_CATEGORY_NAMES: tuple[str, ...] = (
    "Groceries",
    "Rent",
    "Utilities",
    "Entertainment",
    "Transportation",
    "Other",
)


class ExpenseCategory(db.Model):
    __tablename__ = "expense_categories"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )

    expenses: Mapped[list["Expense"]] = relationship(  # noqa: F821
        "Expense",
        back_populates="category",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<ExpenseCategory id={self.id} name={self.name!r}>"
