"""
errors.py — AppError hierarchy and error code registry.

Every error returned by the GroupKitty API must use a code defined here.
Do not raise strings or generic exceptions from service or route code.

Four failure kinds cross the boundary of the invite and settlement core:

  NotFoundError          (404) — referenced user, group, invite or category is absent
  PermissionDeniedError  (403) — actor lacks the relationship the action requires
  ConflictError          (409) — a uniqueness rule would be violated
  InvalidStateError      (422) — the invite is not in the state the action requires

The pure core raises these subclasses and never picks a status itself;
the status travels with the class and is rendered by the global handler.
"""

from __future__ import annotations


class AppError(Exception):

    def __init__(
            self,
            code: str,
            message: str,
            http_status: int,
            field: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code        = code
        self.message     = message
        self.http_status = http_status
        self.field       = field  # which request field caused the error

    def to_dict(self) -> dict:
        payload = {
            "code":    self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        return {"error": payload}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"http_status={self.http_status}, "
            f"message={self.message!r})"
        )


class _TypedError(AppError):
    """AppError whose HTTP status is fixed by the error kind."""

    status: int = 500

    def __init__(self, code: str, message: str, field: str | None = None) -> None:
        super().__init__(code, message, self.status, field=field)


class NotFoundError(_TypedError):
    status = 404


class PermissionDeniedError(_TypedError):
    status = 403


class ConflictError(_TypedError):
    status = 409


class InvalidStateError(_TypedError):
    status = 422


# ── Error Code Registry ────────────────────────────────────────────────────
#
# Organised by category. HTTP status is indicated in the comment.
#
# IMPORTANT: these are the string values sent in the API response.
# Do not rename them without a major version bump.
# ──────────────────────────────────────────────────────────────────────────

class ErrorCode:

    # ── Schema / Input Errors (400) ────────────────────────────────────────
    MISSING_FIELD              = "MISSING_FIELD"
    INVALID_FIELD              = "INVALID_FIELD"
    INVALID_AMOUNT_PRECISION   = "INVALID_AMOUNT_PRECISION"

    # ── Conflict Errors (409) ──────────────────────────────────────────────
    DUPLICATE_EMAIL            = "DUPLICATE_EMAIL"
    DUPLICATE_USERNAME         = "DUPLICATE_USERNAME"
    ALREADY_MEMBER             = "ALREADY_MEMBER"
    INVITE_ALREADY_EXISTS      = "INVITE_ALREADY_EXISTS"

    # ── Not Found Errors (404) ─────────────────────────────────────────────
    USER_NOT_FOUND             = "USER_NOT_FOUND"
    GROUP_NOT_FOUND            = "GROUP_NOT_FOUND"
    CATEGORY_NOT_FOUND         = "CATEGORY_NOT_FOUND"
    INVITE_NOT_FOUND           = "INVITE_NOT_FOUND"

    # ── Invalid State (422) ────────────────────────────────────────────────
    # Accept / reject / revoke attempted on an invite that is no longer pending.
    INVITE_NOT_PENDING         = "INVITE_NOT_PENDING"

    # ── Auth Errors ────────────────────────────────────────────────────────
    # 401 = we do not know who you are (unauthenticated)
    # 403 = we know who you are, but you are not allowed (unauthorized)
    INVALID_CREDENTIALS        = "INVALID_CREDENTIALS"    # 401
    TOKEN_MISSING              = "TOKEN_MISSING"          # 401
    TOKEN_INVALID              = "TOKEN_INVALID"          # 401
    TOKEN_EXPIRED              = "TOKEN_EXPIRED"          # 401
    FORBIDDEN                  = "FORBIDDEN"              # 403

    # ── System Errors (500) ────────────────────────────────────────────────
    INTERNAL_ERROR             = "INTERNAL_ERROR"
