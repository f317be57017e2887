"""
RecipeHub Backend — Comment SQLAlchemy Model
==============================================

What:  A user's comment attached to exactly one recipe.
How:   `recipe_id` is set at creation and never changes. The author's name
       and avatar are snapshotted so later profile changes don't rewrite
       history. Comments are removed by the recipe delete cascade in
       RecipeService, not by a database constraint.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from recipehub.database import Base


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )

    recipe_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False)

    # Author snapshot at creation time
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    likes: Mapped[List[Dict[str, str]]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        Index("idx_comments_recipe_created_at", "recipe_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, recipe_id={self.recipe_id})>"
