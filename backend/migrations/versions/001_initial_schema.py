"""Initial schema — all tables, constraints, indexes and default categories.

Revision: 001_initial_schema

Append-only: never edit this file after it has been applied anywhere.
Schema changes go in a new migration.

Creation order (FK dependencies):
  users → expense_groups → group_members → expense_categories
  → expenses → group_invites

group_invites.status is a VARCHAR with a CHECK constraint rather than a
native PostgreSQL enum, matching the model's Enum(native_enum=False).
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: tuple | None = None
depends_on: tuple | None = None

_DEFAULT_CATEGORIES = (
    "Groceries",
    "Rent",
    "Utilities",
    "Entertainment",
    "Transportation",
    "Other",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint("LENGTH(TRIM(username)) > 0", name="ck_users_username_nonempty"),
        sa.CheckConstraint("email LIKE '%@%'", name="ck_users_email_format"),
    )

    op.create_table(
        "expense_groups",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "created_by_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT", name="fk_expense_groups_creator"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_expense_groups"),
        sa.CheckConstraint("LENGTH(TRIM(name)) > 0", name="ck_expense_groups_name_nonempty"),
    )

    op.create_table(
        "group_members",
        sa.Column(
            "group_id",
            sa.Integer(),
            sa.ForeignKey("expense_groups.id", ondelete="RESTRICT", name="fk_group_members_group"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT", name="fk_group_members_user"),
            nullable=False,
        ),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("group_id", "user_id", name="pk_group_members"),
    )
    op.create_index("ix_group_members_user_id", "group_members", ["user_id"])

    categories = op.create_table(
        "expense_categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_expense_categories"),
        sa.UniqueConstraint("name", name="uq_expense_categories_name"),
    )
    op.bulk_insert(categories, [{"name": name} for name in _DEFAULT_CATEGORIES])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "group_id",
            sa.Integer(),
            sa.ForeignKey("expense_groups.id", ondelete="RESTRICT", name="fk_expenses_group"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("expense_categories.id", ondelete="RESTRICT", name="fk_expenses_category"),
            nullable=False,
        ),
        sa.Column(
            "paid_by_user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT", name="fk_expenses_payer"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_expenses"),
        sa.CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
    )
    op.create_index("ix_expenses_group_id", "expenses", ["group_id"])

    op.create_table(
        "group_invites",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "sender_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT", name="fk_group_invites_sender"),
            nullable=False,
        ),
        sa.Column(
            "receiver_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="RESTRICT", name="fk_group_invites_receiver"),
            nullable=False,
        ),
        sa.Column(
            "group_id",
            sa.Integer(),
            sa.ForeignKey("expense_groups.id", ondelete="RESTRICT", name="fk_group_invites_group"),
            nullable=False,
        ),
        sa.Column("description", sa.String(140), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_group_invites"),
        sa.UniqueConstraint(
            "sender_id", "receiver_id", "group_id",
            name="uq_group_invites_triple",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected', 'revoked')",
            name="invite_status_enum",
        ),
    )
    op.create_index("ix_group_invites_sender_id", "group_invites", ["sender_id"])
    op.create_index("ix_group_invites_receiver_id", "group_invites", ["receiver_id"])
    op.create_index("ix_group_invites_group_id", "group_invites", ["group_id"])


def downgrade() -> None:
    op.drop_table("group_invites")
    op.drop_table("expenses")
    op.drop_table("expense_categories")
    op.drop_table("group_members")
    op.drop_table("expense_groups")
    op.drop_table("users")
