"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - Tests run against the database named by TEST_DATABASE_URL. The default
    is in-memory SQLite, which Flask-SQLAlchemy serves through one shared
    connection; point it at PostgreSQL to exercise the native constraints.
  - The app is created once per session using create_app("testing").
  - All tables are created once via db.create_all() at session start, and
    the default expense categories are seeded once.
  - Between tests, all rows except categories are deleted in FK-safe order
    so tests are isolated.

Helper functions (not fixtures) are provided for common operations:
  - register(client, ...)        → dict with user + access_token
  - auth_headers(token)          → {"Authorization": "Bearer <token>"}
  - make_group(client, ...)      → group dict
  - invite(...)                  → HTTP response
  - accept(...)                  → HTTP response
  - join_group(...)              → invites and accepts in one step
  - category_id(client, ...)     → id of a category by name
  - make_expense(...)            → HTTP response

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test without fixture parameterization overhead.
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from backend.kitty import create_app
from backend.kitty.extensions import db as _db
from backend.kitty.services.category_service import ensure_default_categories


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """
    Creates the Flask application in 'testing' mode once for the entire test session.

    Steps:
      1. Create app with TestingConfig.
      2. Run db.create_all() to create all tables.
      3. Seed the default categories.
      4. Yield the app for the test session.
      5. Drop all tables at teardown.
    """
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()
        ensure_default_categories(_db.session)
        _db.session.commit()

    yield flask_app

    with flask_app.app_context():
        _db.session.remove()
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """
    Deletes all rows between tests in FK-safe order.

    Delete order respects FK RESTRICT constraints: invites and expenses
    reference groups and users, memberships reference both. Categories
    are reference data and survive between tests.
    """
    yield  # run the test

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test

        with _db.engine.connect() as conn:
            conn.execute(text("DELETE FROM group_invites"))
            conn.execute(text("DELETE FROM expenses"))
            conn.execute(text("DELETE FROM group_members"))
            conn.execute(text("DELETE FROM expense_groups"))
            conn.execute(text("DELETE FROM users"))
            conn.commit()


# ═══════════════════════════════════════════════════════════════════════════
# Client fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def register(
    client,
    username: str = "alice",
    email: str | None = None,
    password: str = "Password1",
) -> dict:
    """
    Registers a new user and returns the full response data dict.
    Returns: {"user": {...}, "access_token": "..."}
    """
    if email is None:
        email = f"{username}@test.com"
    resp = client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    assert resp.status_code == 201, f"register failed: {resp.get_json()}"
    return resp.get_json()["data"]


def auth_headers(token: str) -> dict:
    """Returns the Authorization header dict for use in test requests."""
    return {"Authorization": f"Bearer {token}"}


def make_group(client, token: str, name: str = "Test Group") -> dict:
    """
    Creates a group and returns the group data dict.
    The caller (token owner) becomes the first member.
    """
    resp = client.post(
        "/api/v1/groups/",
        json={"name": name},
        headers=auth_headers(token),
    )
    assert resp.status_code == 201, f"make_group failed: {resp.get_json()}"
    return resp.get_json()["data"]


def invite(
    client,
    token: str,
    group_id: int,
    receiver_username: str,
    description: str | None = None,
):
    """Sends an invite as the token owner. Returns the HTTP response."""
    payload: dict = {"receiver_username": receiver_username}
    if description is not None:
        payload["description"] = description
    return client.post(
        f"/api/v1/groups/{group_id}/invites",
        json=payload,
        headers=auth_headers(token),
    )


def accept(client, token: str, invite_id: int):
    """Accepts an invite as the token owner. Returns the HTTP response."""
    return client.post(
        f"/api/v1/invites/{invite_id}/accept",
        headers=auth_headers(token),
    )


def join_group(client, owner: dict, member: dict, group_id: int) -> dict:
    """
    Brings `member` into the group: owner invites, member accepts.
    Both arguments are register() results. Returns the accepted invite.
    """
    resp = invite(client, owner["access_token"], group_id, member["user"]["username"])
    assert resp.status_code == 201, f"invite failed: {resp.get_json()}"
    invite_id = resp.get_json()["data"]["id"]

    resp = accept(client, member["access_token"], invite_id)
    assert resp.status_code == 200, f"accept failed: {resp.get_json()}"
    return resp.get_json()["data"]["invite"]


def category_id(client, token: str, name: str) -> int:
    """Returns the id of the category called `name`."""
    resp = client.get("/api/v1/categories/", headers=auth_headers(token))
    assert resp.status_code == 200
    for category in resp.get_json()["data"]:
        if category["name"] == name:
            return category["id"]
    raise AssertionError(f"no category named {name!r}")


def make_expense(
    client,
    token: str,
    group_id: int,
    amount: str,
    category: str = "Other",
    description: str | None = "Test Expense",
):
    """Records an expense paid by the token owner. Returns the HTTP response."""
    payload: dict = {
        "amount": amount,
        "category_id": category_id(client, token, category),
    }
    if description is not None:
        payload["description"] = description
    return client.post(
        f"/api/v1/groups/{group_id}/expenses",
        json=payload,
        headers=auth_headers(token),
    )
