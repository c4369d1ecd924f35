"""
routes/auth.py — Authentication route handlers.

Parse → validate → call ONE service → commit → envelope.
AppError propagates to the global handler; routes never catch it.

Endpoints (url_prefix=/api/v1/auth):
  POST   /auth/register  → 201
  POST   /auth/login     → 200
  GET    /auth/me        → 200
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from backend.kitty.extensions import db
from backend.kitty.middleware.auth_middleware import require_auth
from backend.kitty.schemas.auth_schema import LoginSchema, RegisterSchema
from backend.kitty.services import auth_service

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
def register():
    """POST /auth/register — Create account; return an access token."""
    data = RegisterSchema().load(request.get_json(force=True) or {})
    result = auth_service.register_user(
        username=data["username"],
        email=data["email"],
        password=data["password"],
        session=db.session,
    )
    db.session.commit()
    return jsonify({"data": result, "warnings": []}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    """POST /auth/login — Authenticate; return an access token."""
    data = LoginSchema().load(request.get_json(force=True) or {})
    result = auth_service.login_user(
        username=data["username"],
        password=data["password"],
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    """GET /auth/me — Current user profile."""
    result = auth_service.get_current_user(user_id=g.user_id, session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
