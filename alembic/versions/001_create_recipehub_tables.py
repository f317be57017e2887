"""Create users, recipes, folders and comments tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Initial schema. Embedded arrays (ingredients, instructions, tags,
       likes, folder membership) are JSON columns on their owning row.
How:   PostgreSQL UUID primary keys and TIMESTAMP WITH TIME ZONE.

recipes.parent_recipe_id and comments.recipe_id are not
foreign keys: forks outlive their parents, and comments are removed by the
application-level recipe delete cascade.

Rollback: downgrade() drops all four tables (destructive).
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


def _created_at_column() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _json_list_column(name: str, comment: str) -> sa.Column:
    return sa.Column(name, sa.JSON(), nullable=False, server_default=sa.text("'[]'"), comment=comment)


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("avatar", sa.String(500), nullable=True),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "recipes",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        _json_list_column("ingredients", "[{name, quantity, unit}] in display order"),
        _json_list_column("instructions", "[{step, text}] in display order"),
        sa.Column("cooking_time", sa.Integer(), nullable=False, comment="Minutes"),
        sa.Column("servings", sa.Integer(), nullable=False),
        sa.Column("image", sa.String(500), nullable=True, comment="Public path under /uploads"),
        _json_list_column("tags", "Free-form labels"),
        sa.Column(
            "parent_recipe_id",
            postgresql.UUID(as_uuid=True),
            nullable=True,
            comment="Recipe this one was forked from; may dangle after the parent is deleted",
        ),
        sa.Column("is_forked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("modifications", sa.Text(), nullable=True),
        _json_list_column("likes", "[{user}] most recent first, one entry per user"),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index("idx_recipes_created_at", "recipes", [sa.text("created_at DESC")])
    op.create_index("idx_recipes_user_id", "recipes", ["user_id"])

    op.create_table(
        "folders",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _json_list_column("recipes", "Member recipe ids, no duplicates"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index("idx_folders_user_id", "folders", ["user_id"])
    op.create_index(
        "idx_folders_public_created_at", "folders", ["is_public", sa.text("created_at DESC")]
    )

    op.create_table(
        "comments",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("name", sa.String(100), nullable=True, comment="Author name at time of writing"),
        sa.Column("avatar", sa.String(500), nullable=True, comment="Author avatar at time of writing"),
        _json_list_column("likes", "[{user}] most recent first, one entry per user"),
        _created_at_column(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
    )
    op.create_index(
        "idx_comments_recipe_created_at", "comments", ["recipe_id", sa.text("created_at DESC")]
    )


def downgrade() -> None:
    op.drop_index("idx_comments_recipe_created_at", table_name="comments")
    op.drop_table("comments")
    op.drop_index("idx_folders_public_created_at", table_name="folders")
    op.drop_index("idx_folders_user_id", table_name="folders")
    op.drop_table("folders")
    op.drop_index("idx_recipes_user_id", table_name="recipes")
    op.drop_index("idx_recipes_created_at", table_name="recipes")
    op.drop_table("recipes")
    op.drop_table("users")
