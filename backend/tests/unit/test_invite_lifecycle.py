"""
tests/unit/test_invite_lifecycle.py — Unit tests for the invite state machine.

Covers every row of the transition table plus every refusal:
  pending --accept(receiver)--> accepted  + membership admission
  pending --reject(receiver)--> rejected
  pending --revoke(sender)----> revoked
  anything terminal           → INVITE_NOT_PENDING (422)
  wrong actor                 → FORBIDDEN (403), checked before state
  missing invite              → INVITE_NOT_FOUND (404)

And the creation rules of validate_new_invite, in their fixed order.
No database: invites are SimpleNamespace rows.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from backend.kitty.errors import (
    AppError,
    ConflictError,
    ErrorCode,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
)
from backend.kitty.models.invite import InviteStatus
from backend.kitty.services import invite_lifecycle
from backend.kitty.services.invite_lifecycle import (
    InviteAction,
    MembershipAdmission,
    accept_invite,
    reject_invite,
    revoke_invite,
    transition,
    validate_new_invite,
)

SENDER = 1
RECEIVER = 2
STRANGER = 3
GROUP = 10


def _invite(status: str = "pending", invite_id: int = 100) -> SimpleNamespace:
    return SimpleNamespace(
        id=invite_id,
        sender_id=SENDER,
        receiver_id=RECEIVER,
        group_id=GROUP,
        status=status,
    )


def _user(user_id: int) -> SimpleNamespace:
    return SimpleNamespace(id=user_id, username=f"user{user_id}")


# ═══════════════════════════════════════════════════════════════════════════
# Successful transitions
# ═══════════════════════════════════════════════════════════════════════════

class TestTransitions:

    def test_accept_moves_to_accepted_and_admits_receiver(self):
        result = accept_invite(_invite(), receiver_id=RECEIVER)

        assert result.invite_id == 100
        assert result.from_status is InviteStatus.PENDING
        assert result.to_status is InviteStatus.ACCEPTED
        assert result.admission == MembershipAdmission(group_id=GROUP, user_id=RECEIVER)

    def test_reject_moves_to_rejected_without_admission(self):
        result = reject_invite(_invite(), receiver_id=RECEIVER)

        assert result.to_status is InviteStatus.REJECTED
        assert result.admission is None

    def test_revoke_moves_to_revoked_without_admission(self):
        result = revoke_invite(_invite(), sender_id=SENDER)

        assert result.to_status is InviteStatus.REVOKED
        assert result.admission is None

    def test_transition_does_not_mutate_invite(self):
        invite = _invite()

        transition(invite, InviteAction.ACCEPT, RECEIVER)

        assert invite.status == "pending"

    def test_enum_status_is_accepted_as_input(self):
        invite = _invite(status=InviteStatus.PENDING)

        assert accept_invite(invite, RECEIVER).to_status is InviteStatus.ACCEPTED

    def test_admission_to_dict(self):
        assert MembershipAdmission(group_id=5, user_id=6).to_dict() == {
            "group_id": 5,
            "user_id": 6,
        }


# ═══════════════════════════════════════════════════════════════════════════
# Refusals
# ═══════════════════════════════════════════════════════════════════════════

class TestRefusals:

    @pytest.mark.parametrize("action", list(InviteAction))
    def test_missing_invite_is_not_found(self, action):
        with pytest.raises(NotFoundError) as exc_info:
            transition(None, action, RECEIVER)

        assert exc_info.value.code == ErrorCode.INVITE_NOT_FOUND
        assert exc_info.value.http_status == 404

    @pytest.mark.parametrize(
        "action, actor",
        [
            (InviteAction.ACCEPT, SENDER),
            (InviteAction.ACCEPT, STRANGER),
            (InviteAction.REJECT, SENDER),
            (InviteAction.REJECT, STRANGER),
            (InviteAction.REVOKE, RECEIVER),
            (InviteAction.REVOKE, STRANGER),
        ],
    )
    def test_wrong_actor_is_forbidden(self, action, actor):
        with pytest.raises(PermissionDeniedError) as exc_info:
            transition(_invite(), action, actor)

        assert exc_info.value.code == ErrorCode.FORBIDDEN
        assert exc_info.value.http_status == 403

    @pytest.mark.parametrize("status", ["accepted", "rejected", "revoked"])
    @pytest.mark.parametrize(
        "action, actor",
        [
            (InviteAction.ACCEPT, RECEIVER),
            (InviteAction.REJECT, RECEIVER),
            (InviteAction.REVOKE, SENDER),
        ],
    )
    def test_terminal_invite_cannot_move(self, status, action, actor):
        with pytest.raises(InvalidStateError) as exc_info:
            transition(_invite(status=status), action, actor)

        assert exc_info.value.code == ErrorCode.INVITE_NOT_PENDING
        assert exc_info.value.http_status == 422

    def test_wrong_actor_on_resolved_invite_is_forbidden_not_invalid_state(self):
        with pytest.raises(PermissionDeniedError):
            accept_invite(_invite(status="accepted"), receiver_id=STRANGER)

    def test_second_accept_fails(self):
        invite = _invite()
        first = accept_invite(invite, RECEIVER)
        invite.status = first.to_status.value

        with pytest.raises(InvalidStateError):
            accept_invite(invite, RECEIVER)

    def test_errors_are_app_errors(self):
        with pytest.raises(AppError):
            revoke_invite(None, SENDER)


# ═══════════════════════════════════════════════════════════════════════════
# validate_new_invite
# ═══════════════════════════════════════════════════════════════════════════

class TestValidateNewInvite:

    def test_valid_invite_passes(self):
        validate_new_invite(
            sender_id=SENDER,
            receiver=_user(RECEIVER),
            group_id=GROUP,
            member_ids=[SENDER, 4],
            existing_invites=[],
        )

    def test_sender_not_member_is_forbidden(self):
        with pytest.raises(PermissionDeniedError) as exc_info:
            validate_new_invite(SENDER, _user(RECEIVER), GROUP, [4], [])

        assert exc_info.value.code == ErrorCode.FORBIDDEN

    def test_non_member_sender_checked_before_missing_receiver(self):
        with pytest.raises(PermissionDeniedError):
            validate_new_invite(SENDER, None, GROUP, [], [])

    def test_missing_receiver_is_user_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            validate_new_invite(SENDER, None, GROUP, [SENDER], [])

        err = exc_info.value
        assert err.code == ErrorCode.USER_NOT_FOUND
        assert err.field == "receiver_username"

    def test_receiver_already_member_conflicts(self):
        with pytest.raises(ConflictError) as exc_info:
            validate_new_invite(SENDER, _user(RECEIVER), GROUP, [SENDER, RECEIVER], [])

        assert exc_info.value.code == ErrorCode.ALREADY_MEMBER
        assert exc_info.value.http_status == 409

    def test_self_invite_conflicts_as_already_member(self):
        with pytest.raises(ConflictError) as exc_info:
            validate_new_invite(SENDER, _user(SENDER), GROUP, [SENDER], [])

        assert exc_info.value.code == ErrorCode.ALREADY_MEMBER

    @pytest.mark.parametrize("status", ["pending", "accepted", "rejected", "revoked"])
    def test_existing_invite_for_receiver_conflicts_whatever_its_status(self, status):
        existing = [_invite(status=status)]

        with pytest.raises(ConflictError) as exc_info:
            validate_new_invite(4, _user(RECEIVER), GROUP, [SENDER, 4], existing)

        assert exc_info.value.code == ErrorCode.INVITE_ALREADY_EXISTS

    def test_invite_where_receiver_was_sender_conflicts(self):
        # receiver once invited someone else into this group, then left
        existing = [SimpleNamespace(id=7, sender_id=RECEIVER, receiver_id=5, group_id=GROUP)]

        with pytest.raises(ConflictError) as exc_info:
            validate_new_invite(SENDER, _user(RECEIVER), GROUP, [SENDER], existing)

        assert exc_info.value.code == ErrorCode.INVITE_ALREADY_EXISTS

    def test_invites_of_other_groups_are_ignored(self):
        existing = [SimpleNamespace(id=7, sender_id=SENDER, receiver_id=RECEIVER, group_id=99)]

        validate_new_invite(SENDER, _user(RECEIVER), GROUP, [SENDER], existing)


def test_every_action_has_a_transition():
    assert set(invite_lifecycle._TRANSITIONS) == set(InviteAction)
