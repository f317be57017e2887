"""
RecipeHub Backend — Folder SQLAlchemy Model
=============================================

What:  A user's named collection of recipes.
How:   Membership is a JSON list of recipe ids (strings). It is a non-owning
       reference: deleting a folder never touches recipes, and deleting a
       recipe does not prune folders that list it.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from recipehub.database import Base


class Folder(Base):
    __tablename__ = "folders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Ordered, each recipe id at most once
    recipes: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_folders_user_id", "user_id"),
        Index("idx_folders_public_created_at", "is_public", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name='{self.name}', public={self.is_public})>"
