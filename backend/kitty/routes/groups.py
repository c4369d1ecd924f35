"""
routes/groups.py — Group route handlers.

Endpoints (url_prefix=/api/v1/groups):
  POST   /groups                   → 201  create group (caller becomes first member)
  GET    /groups                   → 200  list caller's groups
  GET    /groups/:id               → 200  group + members (members only)

Members are added through invites only; see routes/invites.py.
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from backend.kitty.extensions import db
from backend.kitty.middleware.auth_middleware import require_auth
from backend.kitty.schemas.group_schema import CreateGroupSchema
from backend.kitty.services import group_service

groups_bp = Blueprint("groups", __name__)


@groups_bp.route("/", methods=["POST"])
@require_auth
def create_group():
    data = CreateGroupSchema().load(request.get_json(force=True) or {})
    result = group_service.create_group(
        name=data["name"].strip(),
        creator_id=g.user_id,
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@groups_bp.route("/", methods=["GET"])
@require_auth
def list_groups():
    result = group_service.list_groups(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200


@groups_bp.route("/<int:group_id>", methods=["GET"])
@require_auth
def get_group(group_id: int):
    result = group_service.get_group(
        group_id=group_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200
