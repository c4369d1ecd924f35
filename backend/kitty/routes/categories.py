"""
routes/categories.py — Expense category listing.

Endpoints (url_prefix=/api/v1/categories):
  GET /categories   → 200
"""

from __future__ import annotations

from flask import Blueprint, jsonify

from backend.kitty.extensions import db
from backend.kitty.middleware.auth_middleware import require_auth
from backend.kitty.services import category_service

categories_bp = Blueprint("categories", __name__)


@categories_bp.route("/", methods=["GET"])
@require_auth
def list_categories():
    result = category_service.list_categories(session=db.session)
    return jsonify({"data": result, "warnings": []}), 200
