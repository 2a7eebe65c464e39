"""Create RecipeHub tables

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates users, recipes, recipe_reviews, saved_recipes, role_requests
       and counters with their unique indexes, and seeds the ticket counter.
How:   PostgreSQL UUID keys with gen_random_uuid() server defaults and
       TIMESTAMP WITH TIME ZONE columns. Case-insensitive uniqueness uses
       functional indexes on lower(); "one pending request per user" is a
       partial unique index.

Rollback: downgrade() drops every table (all data is lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp_columns() -> list:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _id_column(),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("password", sa.String(255), nullable=False, comment="bcrypt digest"),
        sa.Column(
            "roles",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'[\"Reader\"]'"),
            comment="Role labels: Reader, Writer, Admin",
        ),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_users_username_lower",
        "users",
        [sa.text("lower(username)")],
        unique=True,
    )

    # ── recipes ───────────────────────────────────────────────────────────
    op.create_table(
        "recipes",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("image", sa.String(500), nullable=False),
        sa.Column("ingredients", sa.Text(), nullable=False, comment="Newline-joined lines"),
        sa.Column("instructions", sa.Text(), nullable=False, comment="Newline-joined lines"),
        sa.Column("cooking_time", sa.Integer(), nullable=False, comment="Minutes"),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("ticket", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("ratings_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("ticket"),
    )
    op.create_index("ix_recipes_user_id", "recipes", ["user_id"])
    op.create_index(
        "uq_recipes_title_lower",
        "recipes",
        [sa.text("lower(title)")],
        unique=True,
    )

    # ── recipe_reviews ────────────────────────────────────────────────────
    op.create_table(
        "recipe_reviews",
        _id_column(),
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["recipe_id"], ["recipes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.UniqueConstraint("recipe_id", "user_id", name="uq_recipe_reviews_recipe_user"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_recipe_reviews_rating_range"),
    )

    # ── saved_recipes ─────────────────────────────────────────────────────
    op.create_table(
        "saved_recipes",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("user_id", "recipe_id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["recipe_id"], ["recipes.id"], ondelete="CASCADE"),
    )

    # ── role_requests ─────────────────────────────────────────────────────
    op.create_table(
        "role_requests",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("current_role", sa.String(200), nullable=False),
        sa.Column("requested_role", sa.String(50), nullable=False, server_default=sa.text("'Writer'")),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
            comment="pending, approved, rejected",
        ),
        sa.Column("admin_note", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_role_requests_user_id", "role_requests", ["user_id"])
    op.create_index(
        "uq_role_requests_pending_user",
        "role_requests",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )

    # ── counters ──────────────────────────────────────────────────────────
    counters = op.create_table(
        "counters",
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )
    # seq is the last ticket issued; the first recipe gets 500
    op.bulk_insert(counters, [{"name": "recipe_ticket", "seq": 499}])


def downgrade() -> None:
    op.drop_table("counters")
    op.drop_index("uq_role_requests_pending_user", table_name="role_requests")
    op.drop_index("ix_role_requests_user_id", table_name="role_requests")
    op.drop_table("role_requests")
    op.drop_table("saved_recipes")
    op.drop_table("recipe_reviews")
    op.drop_index("uq_recipes_title_lower", table_name="recipes")
    op.drop_index("ix_recipes_user_id", table_name="recipes")
    op.drop_table("recipes")
    op.drop_index("uq_users_username_lower", table_name="users")
    op.drop_table("users")
