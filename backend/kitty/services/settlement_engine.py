"""
services/settlement_engine.py — Equal-share balance computation.

This file is the SINGLE SOURCE OF TRUTH for how a group's balances are
computed. summary_service.py loads the snapshot; everything numeric happens here.

Formula (per group, equal split across current members):
    total        = Σ expense.amount
    equal_share  = total / member_count        (0 when there are no members)
    paid[m]      = Σ expense.amount where expense.paid_by_user_id == m
    balance[m]   = paid[m] - equal_share       (> 0: owed money, < 0: owes money)

Arithmetic is exact Decimal throughout. Rounding to 2 places happens only
in to_dict(), so rounding error never compounds across members.

Layer rules:
  - No Flask, no SQLAlchemy session, no logging.
  - Inputs are duck-typed: ORM rows or any object with the same attributes.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

ZERO = Decimal("0")
CENT = Decimal("0.01")


def format_amount(value: Decimal) -> str:
    """Renders a Decimal with exactly 2 fractional digits. Never returns "-0.00"."""
    rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if rounded == ZERO:
        rounded = abs(rounded)
    return str(rounded)


@dataclass(frozen=True)
class MemberBalance:
    user_id: int
    username: str
    total_paid: Decimal
    equal_share: Decimal
    balance: Decimal

    def to_dict(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "total_paid": format_amount(self.total_paid),
            "equal_share": format_amount(self.equal_share),
            "balance": format_amount(self.balance),
        }


@dataclass(frozen=True)
class SettlementSummary:
    total: Decimal
    equal_share: Decimal
    members: list[MemberBalance] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total": format_amount(self.total),
            "equal_share": format_amount(self.equal_share),
            "members": [m.to_dict() for m in self.members],
        }


@dataclass(frozen=True)
class CategoryTotal:
    category_id: int
    name: str
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "id": self.category_id,
            "name": self.name,
            "total": format_amount(self.total),
        }


def _unique_by_id(rows: Iterable[Any]) -> list[Any]:
    """Drops repeated ids, keeping the first occurrence."""
    seen: dict[int, Any] = {}
    for row in rows:
        seen.setdefault(row.id, row)
    return list(seen.values())


def compute_balances(members: Iterable[Any], expenses: Iterable[Any]) -> SettlementSummary:
    """
    Computes total, equal share and per-member balances for one group.

    Args:
        members:  Current group members (each with .id and .username).
        expenses: All expenses of the group (each with .amount and
                  .paid_by_user_id). Expenses paid by former members still
                  count toward the total.

    Returns:
        SettlementSummary with members ordered by total paid (descending),
        ties broken by user id (ascending).

    Never raises for well-formed input: an empty member list yields
    total = equal_share = 0 and no members, not a division error.
    """
    member_rows = _unique_by_id(members)
    expense_rows = list(expenses)

    paid_by: dict[int, Decimal] = defaultdict(lambda: ZERO)
    total = ZERO
    for expense in expense_rows:
        amount = Decimal(expense.amount)
        total += amount
        paid_by[expense.paid_by_user_id] += amount

    if not member_rows:
        return SettlementSummary(total=ZERO, equal_share=ZERO, members=[])

    equal_share = total / Decimal(len(member_rows))

    balances = [
        MemberBalance(
            user_id=m.id,
            username=m.username,
            total_paid=paid_by.get(m.id, ZERO),
            equal_share=equal_share,
            balance=paid_by.get(m.id, ZERO) - equal_share,
        )
        for m in member_rows
    ]
    balances.sort(key=lambda b: (-b.total_paid, b.user_id))

    return SettlementSummary(total=total, equal_share=equal_share, members=balances)


def compute_category_totals(
        categories: Iterable[Any],
        expenses: Iterable[Any],
) -> list[CategoryTotal]:
    """
    Sums expense amounts per category for one group.

    Every category appears exactly once; unused categories report 0.
    Expenses whose category_id is not among `categories` are ignored.
    Ordered by total (descending), ties broken by category id (ascending).
    """
    category_rows = _unique_by_id(categories)
    known_ids = {c.id for c in category_rows}

    sums: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for expense in expenses:
        if expense.category_id in known_ids:
            sums[expense.category_id] += Decimal(expense.amount)

    totals = [
        CategoryTotal(category_id=c.id, name=c.name, total=sums.get(c.id, ZERO))
        for c in category_rows
    ]
    totals.sort(key=lambda t: (-t.total, t.category_id))
    return totals
