"""
routes/summaries.py — Settlement and category summary handlers.

Endpoints (url_prefix=/api/v1/groups):
  GET /groups/:id/summary      → 200  total, equal share, per-member balances
  GET /groups/:id/categories   → 200  per-category totals (every category listed)

Both are read-only and recomputed on every request.
"""

from __future__ import annotations

from flask import Blueprint, g, jsonify

from backend.kitty.extensions import db
from backend.kitty.middleware.auth_middleware import require_auth
from backend.kitty.services import summary_service

summaries_bp = Blueprint("summaries", __name__)


@summaries_bp.route("/<int:group_id>/summary", methods=["GET"])
@require_auth
def get_summary(group_id: int):
    result = summary_service.get_group_summary(
        group_id=group_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200


@summaries_bp.route("/<int:group_id>/categories", methods=["GET"])
@require_auth
def get_category_summary(group_id: int):
    result = summary_service.get_category_summary(
        group_id=group_id,
        caller_id=g.user_id,
        session=db.session,
    )
    return jsonify({"data": result, "warnings": []}), 200
