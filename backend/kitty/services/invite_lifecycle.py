"""
services/invite_lifecycle.py — Group invite state machine.

This file is the SINGLE place where invite transitions are decided.
It owns no storage: it receives already-loaded rows and returns the
transition to apply. invite_service.py loads the rows and persists the result.

States: pending (initial) → accepted | rejected | revoked (all terminal).

    | from    | action            | to       | side effect             |
    |---------|-------------------|----------|-------------------------|
    | pending | accept (receiver) | accepted | admit receiver to group |
    | pending | reject (receiver) | rejected | none                    |
    | pending | revoke (sender)   | revoked  | none                    |

Failure order for every transition is fixed so callers can tell the cases apart:
  invite missing         → NotFoundError(INVITE_NOT_FOUND)
  actor has wrong role   → PermissionDeniedError(FORBIDDEN)
  invite not pending     → InvalidStateError(INVITE_NOT_PENDING)

Layer rules:
  - No Flask, no SQLAlchemy session, no logging.
  - Never mutates the invite passed in.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable

from backend.kitty.errors import (
    ConflictError,
    ErrorCode,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from backend.kitty.models.invite import InviteStatus


class InviteAction(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"
    REVOKE = "revoke"


# action → (role the actor must hold on the invite, resulting status)
_TRANSITIONS: dict[InviteAction, tuple[str, InviteStatus]] = {
    InviteAction.ACCEPT: ("receiver_id", InviteStatus.ACCEPTED),
    InviteAction.REJECT: ("receiver_id", InviteStatus.REJECTED),
    InviteAction.REVOKE: ("sender_id",   InviteStatus.REVOKED),
}


@dataclass(frozen=True)
class MembershipAdmission:
    """Instruction to add user_id to group_id, applied with the status update."""

    group_id: int
    user_id: int

    def to_dict(self) -> dict:
        return {"group_id": self.group_id, "user_id": self.user_id}


@dataclass(frozen=True)
class InviteTransition:
    invite_id: int
    from_status: InviteStatus
    to_status: InviteStatus
    admission: MembershipAdmission | None = None


def validate_new_invite(
        sender_id: int,
        receiver: Any | None,
        group_id: int,
        member_ids: Iterable[int],
        existing_invites: Iterable[Any],
) -> None:
    """
    Checks that sender_id may invite `receiver` into group_id.

    Args:
        receiver:         The target user row, or None if the lookup found nothing.
        member_ids:       Current member ids of the group.
        existing_invites: Invite rows of the group in which the receiver is
                          either sender or receiver. Status does not matter.

    Raises:
        PermissionDeniedError(FORBIDDEN)       — sender is not a member
        NotFoundError(USER_NOT_FOUND)          — receiver does not exist
        ConflictError(ALREADY_MEMBER)          — receiver is already a member
        ConflictError(INVITE_ALREADY_EXISTS)   — an invite record already exists
    """
    members = set(member_ids)

    if sender_id not in members:
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN,
            f"You are not a member of group {group_id}.",
        )

    if receiver is None:
        raise NotFoundError(
            ErrorCode.USER_NOT_FOUND,
            "The invited user does not exist.",
            field="receiver_username",
        )

    if receiver.id in members:
        raise ConflictError(
            ErrorCode.ALREADY_MEMBER,
            f"User {receiver.id} is already a member of group {group_id}.",
            field="receiver_username",
        )

    for invite in existing_invites:
        if invite.group_id == group_id and receiver.id in (invite.sender_id, invite.receiver_id):
            raise ConflictError(
                ErrorCode.INVITE_ALREADY_EXISTS,
                f"User {receiver.id} already has an invite record for group {group_id}.",
                field="receiver_username",
            )


def transition(invite: Any | None, action: InviteAction, actor_id: int) -> InviteTransition:
    """
    Decides the outcome of `action` performed by actor_id on `invite`.

    Pure: returns the transition for the caller to persist. The caller must
    apply it with a compare-and-set on status = 'pending' so that two
    concurrent accepts produce exactly one success.
    """
    if invite is None:
        raise NotFoundError(
            ErrorCode.INVITE_NOT_FOUND,
            "The invite does not exist.",
        )

    role, to_status = _TRANSITIONS[action]
    if getattr(invite, role) != actor_id:
        raise PermissionDeniedError(
            ErrorCode.FORBIDDEN,
            f"You may not {action.value} invite {invite.id}.",
        )

    from_status = InviteStatus(invite.status)
    if from_status.is_terminal:
        raise InvalidStateError(
            ErrorCode.INVITE_NOT_PENDING,
            f"Invite {invite.id} is already {from_status.value}.",
        )

    admission = None
    if action is InviteAction.ACCEPT:
        admission = MembershipAdmission(group_id=invite.group_id, user_id=invite.receiver_id)

    return InviteTransition(
        invite_id=invite.id,
        from_status=from_status,
        to_status=to_status,
        admission=admission,
    )


def accept_invite(invite: Any | None, receiver_id: int) -> InviteTransition:
    return transition(invite, InviteAction.ACCEPT, receiver_id)


def reject_invite(invite: Any | None, receiver_id: int) -> InviteTransition:
    return transition(invite, InviteAction.REJECT, receiver_id)


def revoke_invite(invite: Any | None, sender_id: int) -> InviteTransition:
    return transition(invite, InviteAction.REVOKE, sender_id)
