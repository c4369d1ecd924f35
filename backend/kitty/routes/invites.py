"""
routes/invites.py — Group invite route handlers.

Registered at url_prefix=/api/v1 because this blueprint owns both the
group-scoped creation path and the invite-id paths.

The actor is always the authenticated caller (g.user_id): the sender when
creating or revoking, the receiver when accepting or rejecting.

Endpoints:
  POST   /groups/:id/invites        → 201  invite a user by username
  GET    /invites/sent              → 200  invites the caller sent
  GET    /invites/received          → 200  invites addressed to the caller
  POST   /invites/:id/accept        → 200  receiver joins the group
  POST   /invites/:id/reject        → 200
  POST   /invites/:id/revoke        → 200  sender withdraws a pending invite
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from backend.kitty.extensions import db
from backend.kitty.middleware.auth_middleware import require_auth
from backend.kitty.schemas.group_schema import CreateInviteSchema
from backend.kitty.services import invite_service

invites_bp = Blueprint("invites", __name__)


@invites_bp.route("/groups/<int:group_id>/invites", methods=["POST"])
@require_auth
def create_invite(group_id: int):
    data = CreateInviteSchema().load(request.get_json(force=True) or {})
    result = invite_service.create_invite(
        group_id=group_id,
        sender_id=g.user_id,
        receiver_username=data["receiver_username"].strip(),
        description=data["description"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@invites_bp.route("/invites/sent", methods=["GET"])
@require_auth
def list_sent():
    result = invite_service.list_sent_invites(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@invites_bp.route("/invites/received", methods=["GET"])
@require_auth
def list_received():
    result = invite_service.list_received_invites(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@invites_bp.route("/invites/<int:invite_id>/accept", methods=["POST"])
@require_auth
def accept(invite_id: int):
    result = invite_service.accept_invite(
        invite_id=invite_id,
        receiver_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@invites_bp.route("/invites/<int:invite_id>/reject", methods=["POST"])
@require_auth
def reject(invite_id: int):
    result = invite_service.reject_invite(
        invite_id=invite_id,
        receiver_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200


@invites_bp.route("/invites/<int:invite_id>/revoke", methods=["POST"])
@require_auth
def revoke(invite_id: int):
    result = invite_service.revoke_invite(
        invite_id=invite_id,
        sender_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 200
