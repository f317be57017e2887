"""
RecipeHub Backend — Recipe SQLAlchemy Model
=============================================

What:  ORM model for the `recipes` table.
How:   Ordered sub-documents (ingredients, instructions), tags and likes are
       JSON columns on the recipe row, so a like or an edit is a single-row
       update.

Column notes:
    - user_id: owner, set at creation and never patched
    - parent_recipe_id: fork lineage. Not a foreign key: a parent may be
      deleted while its forks live on, and the reference then dangles.
    - is_forked: true iff parent_recipe_id is set
    - likes: [{"user": "<uuid>"}, ...], most recent first, each user once

JSON columns are replaced, never mutated in place, so SQLAlchemy sees every
change.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from recipehub.database import Base


class Recipe(Base):
    """
    A user-owned recipe, optionally forked from another recipe.

    Query Patterns:
        - All recipes newest first: ORDER BY created_at DESC
        - One user's recipes: WHERE user_id = :uid ORDER BY created_at DESC
    """

    __tablename__ = "recipes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # [{"name": str, "quantity": str, "unit": str | None}, ...]
    ingredients: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # [{"step": int, "text": str}, ...]
    instructions: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    cooking_time: Mapped[int] = mapped_column(Integer, nullable=False)
    servings: Mapped[int] = mapped_column(Integer, nullable=False)

    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # ── Fork lineage ──────────────────────────────────────────────────────
    parent_recipe_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    is_forked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    modifications: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    likes: Mapped[List[Dict[str, str]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_recipes_created_at", "created_at"),
        Index("idx_recipes_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title='{self.title}', forked={self.is_forked})>"
