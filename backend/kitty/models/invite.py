"""
models/invite.py — Group invite table definition.

No business logic. No imports from services or routes.

Key design points:
  - `status` is the InviteStatus enum, stored as a VARCHAR with a CHECK
    constraint limiting it to the four known values.
  - UNIQUE(sender_id, receiver_id, group_id): at most one invite row per
    triple, whatever its status. A resolved invite is never recreated.
  - Status changes go through services/invite_lifecycle.py only. Nothing
    assigns `invite.status` directly.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.kitty.extensions import db


class InviteStatus(str, enum.Enum):
    PENDING  = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    REVOKED  = "revoked"

    @property
    def is_terminal(self) -> bool:
        return self is not InviteStatus.PENDING


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Ensure SQLAlchemy stores enum values (e.g. 'pending'), not names ('PENDING')."""
    return [member.value for member in enum_cls]


class Invite(db.Model):
    __tablename__ = "group_invites"

    __table_args__ = (
        UniqueConstraint(
            "sender_id",
            "receiver_id",
            "group_id",
            name="uq_group_invites_triple",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    sender_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    receiver_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    group_id: Mapped[int] = mapped_column(
        ForeignKey("expense_groups.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    description: Mapped[str | None] = mapped_column(
        String(140),
        nullable=True,
    )

    status: Mapped[InviteStatus] = mapped_column(
        Enum(
            InviteStatus,
            name="invite_status_enum",
            native_enum=False,
            create_constraint=True,
            length=20,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=InviteStatus.PENDING,
        server_default=InviteStatus.PENDING.value,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ──────────────────────────────────────────────────────

    sender: Mapped["User"] = relationship(  # noqa: F821
        "User",
        foreign_keys=[sender_id],
    )

    receiver: Mapped["User"] = relationship(  # noqa: F821
        "User",
        foreign_keys=[receiver_id],
    )

    group: Mapped["Group"] = relationship(  # noqa: F821
        "Group",
        back_populates="invites",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"<Invite id={self.id} "
            f"group_id={self.group_id} "
            f"from={self.sender_id} "
            f"to={self.receiver_id} "
            f"status={self.status}>"
        )
