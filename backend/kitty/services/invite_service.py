"""
services/invite_service.py — Group invite persistence.

The repository half of the invite lifecycle. It loads invite, membership
and user rows, asks invite_lifecycle.py what should happen, and writes the
outcome. Transition rules live in invite_lifecycle.py and nowhere else.

Atomicity:
  A status change is written as a compare-and-set
      UPDATE group_invites SET status = :to WHERE id = :id AND status = 'pending'
  If no row matches, another request resolved the invite first and this
  one fails with INVITE_NOT_PENDING. On acceptance the membership row is
  added in the same transaction, so the invite is never 'accepted' without
  a membership (or vice versa) once the route commits.

Layer rules:
  - No Flask imports. Receives plain ints/strings and a Session.
  - Commits are the route's responsibility — only flush here.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.kitty.errors import ConflictError, ErrorCode, InvalidStateError
from backend.kitty.models.invite import Invite, InviteStatus
from backend.kitty.models.membership import Membership
from backend.kitty.models.user import User
from backend.kitty.services import invite_lifecycle
from backend.kitty.services.group_service import get_group_or_404, get_member_ids
from backend.kitty.services.invite_lifecycle import InviteAction, InviteTransition

logger = logging.getLogger(__name__)


# ── Serialization helper ───────────────────────────────────────────────────

def _serialize_invite(invite: Invite, include_names: bool = False) -> dict:
    payload = {
        "id": invite.id,
        "sender_id": invite.sender_id,
        "receiver_id": invite.receiver_id,
        "group_id": invite.group_id,
        "description": invite.description,
        "status": InviteStatus(invite.status).value,
        "created_at": invite.created_at.isoformat(),
    }
    if include_names:
        payload["sender_username"] = invite.sender.username
        payload["receiver_username"] = invite.receiver.username
        payload["group_name"] = invite.group.name
    return payload


# ── Data access helpers ────────────────────────────────────────────────────

def _get_user_by_username(username: str, session: Session) -> User | None:
    return session.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()


def _get_invites_involving(group_id: int, user_id: int, session: Session) -> list[Invite]:
    """Invites of a group where user_id is sender or receiver, any status."""
    stmt = select(Invite).where(
        Invite.group_id == group_id,
        or_(Invite.receiver_id == user_id, Invite.sender_id == user_id),
    )
    return list(session.execute(stmt).scalars().all())


def _list_invites(where_clause, session: Session) -> list[dict]:
    stmt = (
        select(Invite)
        .where(where_clause)
        .order_by(Invite.created_at.desc(), Invite.id.desc())
    )
    invites = session.execute(stmt).scalars().all()
    return [_serialize_invite(i, include_names=True) for i in invites]


def _apply_transition(invite: Invite, result: InviteTransition, session: Session) -> dict:
    """
    Persists a transition decided by invite_lifecycle with a compare-and-set
    on status, then applies the membership admission if there is one.
    """
    stmt = (
        update(Invite)
        .where(Invite.id == result.invite_id, Invite.status == InviteStatus.PENDING)
        .values(status=result.to_status)
        .execution_options(synchronize_session=False)
    )
    if session.execute(stmt).rowcount != 1:
        raise InvalidStateError(
            ErrorCode.INVITE_NOT_PENDING,
            f"Invite {result.invite_id} was resolved by another request.",
        )

    admission = result.admission
    if admission is not None:
        already = session.get(Membership, (admission.group_id, admission.user_id))
        if already is None:
            session.add(Membership(group_id=admission.group_id, user_id=admission.user_id))

    session.flush()
    session.refresh(invite)

    logger.info(
        "Invite %s moved %s -> %s",
        result.invite_id, result.from_status.value, result.to_status.value,
    )

    return {
        "invite": _serialize_invite(invite),
        "admission": admission.to_dict() if admission is not None else None,
    }


def _transition(invite_id: int, action: InviteAction, actor_id: int, session: Session) -> dict:
    invite = session.get(Invite, invite_id)
    result = invite_lifecycle.transition(invite, action, actor_id)
    return _apply_transition(invite, result, session)


# ── Public service functions ───────────────────────────────────────────────

def create_invite(
        group_id: int,
        sender_id: int,
        receiver_username: str,
        description: str | None,
        session: Session,
) -> dict:
    """
    Invites the user named receiver_username into group_id.

    Raises:
      NotFoundError(GROUP_NOT_FOUND)           — group does not exist
      PermissionDeniedError(FORBIDDEN)         — sender is not a member
      NotFoundError(USER_NOT_FOUND)            — no user with that username
      ConflictError(ALREADY_MEMBER)            — receiver is already in the group
      ConflictError(INVITE_ALREADY_EXISTS)     — an invite record already exists

    Returns: the new invite (status 'pending') as a dict.
    """
    get_group_or_404(group_id, session)

    receiver = _get_user_by_username(receiver_username, session)
    existing = _get_invites_involving(group_id, receiver.id, session) if receiver else []

    invite_lifecycle.validate_new_invite(
        sender_id=sender_id,
        receiver=receiver,
        group_id=group_id,
        member_ids=get_member_ids(group_id, session),
        existing_invites=existing,
    )

    invite = Invite(
        sender_id=sender_id,
        receiver_id=receiver.id,
        group_id=group_id,
        description=description,
        status=InviteStatus.PENDING,
    )
    session.add(invite)
    try:
        session.flush()
    except IntegrityError as exc:
        # A concurrent request created the same (sender, receiver, group) row.
        session.rollback()
        raise ConflictError(
            ErrorCode.INVITE_ALREADY_EXISTS,
            f"User {receiver.id} already has an invite record for group {group_id}.",
            field="receiver_username",
        ) from exc

    logger.info("User %s invited user %s to group %s", sender_id, receiver.id, group_id)
    return _serialize_invite(invite)


def list_sent_invites(user_id: int, session: Session) -> list[dict]:
    """Invites sent by user_id, newest first, with usernames and group name."""
    return _list_invites(Invite.sender_id == user_id, session)


def list_received_invites(user_id: int, session: Session) -> list[dict]:
    """Invites addressed to user_id, newest first, with usernames and group name."""
    return _list_invites(Invite.receiver_id == user_id, session)


def accept_invite(invite_id: int, receiver_id: int, session: Session) -> dict:
    """
    Accepts a pending invite and admits the receiver to the group.

    Returns: {"invite": {...}, "admission": {"group_id", "user_id"}}
    """
    return _transition(invite_id, InviteAction.ACCEPT, receiver_id, session)


def reject_invite(invite_id: int, receiver_id: int, session: Session) -> dict:
    """Rejects a pending invite. Returns: {"invite": {...}, "admission": None}"""
    return _transition(invite_id, InviteAction.REJECT, receiver_id, session)


def revoke_invite(invite_id: int, sender_id: int, session: Session) -> dict:
    """Revokes a pending invite the caller sent. Returns: {"invite": {...}, "admission": None}"""
    return _transition(invite_id, InviteAction.REVOKE, sender_id, session)
