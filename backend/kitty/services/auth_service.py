"""
services/auth_service.py — Registration, login and token issuance.

Responsibilities:
  - User registration with uniqueness checks on username and email
  - Credential verification (bcrypt)
  - JWT access token creation (HS256, sub = user_id as str)

current_app.config is read for the JWT secret/TTL and bcrypt cost only;
nothing else in this module touches Flask.

Password storage:
  - Hashed with bcrypt (cost factor from config BCRYPT_LOG_ROUNDS)
  - Raw password is never stored, never logged
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone

import bcrypt
import jwt
from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.kitty.errors import AppError, ConflictError, ErrorCode, NotFoundError
from backend.kitty.models.user import User

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────

def _hash_password(password: str) -> str:
    rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", 12)
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds),
    ).decode("utf-8")


def create_access_token(user_id: int) -> str:
    """
    Creates a signed JWT access token.
    Payload: sub (user_id as str), iat, exp, jti.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
        "jti": secrets.token_hex(8),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def _build_user_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "created_at": user.created_at.isoformat(),
    }


# ── Public service functions ───────────────────────────────────────────────

def register_user(username: str, email: str, password: str, session: Session) -> dict:
    """
    Creates a new user account and issues an access token.

    Raises:
      ConflictError(DUPLICATE_USERNAME) — username already taken
      ConflictError(DUPLICATE_EMAIL)    — email already registered

    Returns: {"user": {...}, "access_token": "..."}
    """
    if session.execute(
        select(User.id).where(User.username == username)
    ).scalar_one_or_none() is not None:
        raise ConflictError(
            ErrorCode.DUPLICATE_USERNAME,
            f"The username '{username}' is already taken.",
            field="username",
        )

    if session.execute(
        select(User.id).where(User.email == email)
    ).scalar_one_or_none() is not None:
        raise ConflictError(
            ErrorCode.DUPLICATE_EMAIL,
            f"The email address '{email}' is already registered.",
            field="email",
        )

    user = User(username=username, email=email, password_hash=_hash_password(password))
    session.add(user)
    session.flush()  # populate user.id before signing the token

    logger.info("Registered user %s", user.id)
    return {
        "user": _build_user_dict(user),
        "access_token": create_access_token(user.id),
    }


def login_user(username: str, password: str, session: Session) -> dict:
    """
    Validates credentials and issues a new access token.

    Raises:
      AppError(INVALID_CREDENTIALS, 401) — unknown username or wrong password.
      One error for both cases, so usernames cannot be enumerated.
    """
    user = session.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()

    if user is None or not bcrypt.checkpw(
            password.encode("utf-8"),
            user.password_hash.encode("utf-8"),
    ):
        raise AppError(
            ErrorCode.INVALID_CREDENTIALS,
            "The username or password is incorrect.",
            401,
        )

    return {
        "user": _build_user_dict(user),
        "access_token": create_access_token(user.id),
    }


def get_current_user(user_id: int, session: Session) -> dict:
    """
    Returns the profile of the authenticated user.

    Raises:
      NotFoundError(USER_NOT_FOUND) — the token outlived its user.
    """
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError(
            ErrorCode.USER_NOT_FOUND,
            f"User {user_id} not found.",
        )
    return _build_user_dict(user)
