"""
middleware/auth_middleware.py — Bearer-token authentication for routes.

@require_auth resolves the caller from "Authorization: Bearer <jwt>" and
stores their id on flask.g.user_id. It answers "who is calling" only (401).
Whether the caller may touch a group or invite is decided in the service
layer (403), which receives the id as a plain int.
"""

from __future__ import annotations

import functools
from typing import Callable

import jwt
from flask import current_app, g, request

from backend.kitty.errors import AppError, ErrorCode


def _unauthenticated(code: str, message: str) -> AppError:
    return AppError(code, message, 401)


def require_auth(f: Callable) -> Callable:
    """Route decorator; the wrapped view can rely on g.user_id being an int."""

    @functools.wraps(f)
    def decorated(*args, **kwargs):
        g.user_id = authenticate_request()
        return f(*args, **kwargs)

    return decorated


def authenticate_request() -> int:
    """
    Decodes the bearer token of the current request and returns its user id.

    Raises AppError (401) with TOKEN_MISSING, TOKEN_INVALID or TOKEN_EXPIRED.
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header:
        raise _unauthenticated(
            ErrorCode.TOKEN_MISSING,
            "Authentication required. Provide a Bearer token in the Authorization header.",
        )

    scheme, _, raw_token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not raw_token or " " in raw_token.strip():
        raise _unauthenticated(
            ErrorCode.TOKEN_INVALID,
            "Authorization header must be in the format: Bearer <token>.",
        )

    try:
        payload = jwt.decode(
            raw_token.strip(),
            current_app.config["JWT_SECRET_KEY"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        raise _unauthenticated(
            ErrorCode.TOKEN_EXPIRED,
            "The access token has expired. Log in again to obtain a new one.",
        )
    except jwt.InvalidTokenError:
        raise _unauthenticated(
            ErrorCode.TOKEN_INVALID,
            "The access token is invalid or has been tampered with.",
        )

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthenticated(
            ErrorCode.TOKEN_INVALID,
            "The access token does not carry a valid user id.",
        )
