"""
services/group_service.py — Group and membership business logic.

Membership rules:
  - The creator of a group is its first member.
  - Anyone else joins only by accepting an invite (invite_service.py).
    There is no direct "add member" path.
  - Only members may read group data (FORBIDDEN, 403, for everyone else).

The membership lookups below are also used by expense_service,
summary_service and invite_service. They are the only sanctioned way to
answer "who is in this group".

Layer rules:
  - No Flask imports. Pure Python with a SQLAlchemy session parameter.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.kitty.errors import ErrorCode, NotFoundError, PermissionDeniedError
from backend.kitty.models.group import Group
from backend.kitty.models.membership import Membership
from backend.kitty.models.user import User

logger = logging.getLogger(__name__)


# ── Membership lookups ─────────────────────────────────────────────────────

def get_group_or_404(group_id: int, session: Session) -> Group:
    """Returns the Group or raises GROUP_NOT_FOUND (404)."""
    group = session.get(Group, group_id)
    if group is None:
        raise NotFoundError(
            ErrorCode.GROUP_NOT_FOUND,
            f"Group {group_id} does not exist.",
        )
    return group


def get_member_ids(group_id: int, session: Session) -> list[int]:
    """Returns the user_ids of all current members of a group."""
    stmt = select(Membership.user_id).where(Membership.group_id == group_id)
    return list(session.execute(stmt).scalars().all())


def get_members(group_id: int, session: Session) -> list[User]:
    """Returns User rows for all current members, in join order."""
    stmt = (
        select(User)
        .join(Membership, User.id == Membership.user_id)
        .where(Membership.group_id == group_id)
        .order_by(Membership.joined_at.asc(), User.id.asc())
    )
    return list(session.execute(stmt).scalars().all())


def require_member(group_id: int, user_id: int, session: Session) -> None:
    """
    Raises FORBIDDEN (403) if user_id is not a member of group_id.
    Non-members receive 403, not 404.
    """
    membership = session.get(Membership, (group_id, user_id))
    if membership is None:
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN,
            f"You are not a member of group {group_id}.",
        )


def _build_group_dict(group: Group, members: list[User] | None = None) -> dict:
    """Serialises a Group (and optionally its members) to a plain dict."""
    payload = {
        "id": group.id,
        "name": group.name,
        "created_by_user_id": group.created_by_user_id,
        "created_at": group.created_at.isoformat(),
    }
    if members is not None:
        payload["members"] = [
            {"id": m.id, "username": m.username}
            for m in members
        ]
    return payload


# ── Public service functions ───────────────────────────────────────────────

def create_group(name: str, creator_id: int, session: Session) -> dict:
    """
    Creates a new group and admits the creator as its first member.

    Returns: dict with group details and the initial member list.
    """
    group = Group(name=name, created_by_user_id=creator_id)
    session.add(group)
    session.flush()  # populate group.id before creating membership

    session.add(Membership(group_id=group.id, user_id=creator_id))
    session.flush()

    logger.info("User %s created group %s", creator_id, group.id)

    creator = session.get(User, creator_id)
    return _build_group_dict(group, [creator] if creator else [])


def list_groups(user_id: int, session: Session) -> list[dict]:
    """Returns all groups the user belongs to, oldest first. No member lists."""
    stmt = (
        select(Group)
        .join(Membership, Group.id == Membership.group_id)
        .where(Membership.user_id == user_id)
        .order_by(Group.created_at.asc(), Group.id.asc())
    )
    groups = session.execute(stmt).scalars().all()
    return [_build_group_dict(g) for g in groups]


def get_group(group_id: int, caller_id: int, session: Session) -> dict:
    """
    Returns group details including the current member list.

    Raises:
      NotFoundError(GROUP_NOT_FOUND)      — group does not exist
      PermissionDeniedError(FORBIDDEN)    — caller is not a member
    """
    group = get_group_or_404(group_id, session)
    require_member(group_id, caller_id, session)
    return _build_group_dict(group, get_members(group_id, session))
