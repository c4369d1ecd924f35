"""
tests/conftest.py — Shared by the unit and integration suites.

Models reference each other by class name ("Expense", "Invite", ...), so the
mapper registry is only complete once every model module is imported. Unit
tests that construct ORM objects without create_app() rely on this.
"""

from backend.kitty.models import (  # noqa: F401
    category,
    expense,
    group,
    invite,
    membership,
    user,
)
