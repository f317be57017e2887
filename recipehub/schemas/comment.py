"""
RecipeHub Backend — Comment Schemas
=====================================
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from recipehub.schemas.common import ApiModel, LikeEntry, UserSummary, require_text


class CommentCreate(ApiModel):
    text: str = Field(max_length=2000)

    @field_validator("text")
    @classmethod
    def text_required(cls, v: str) -> str:
        return require_text(v, "Text is required")


class CommentUpdate(CommentCreate):
    """Updates replace the text; nothing else on a comment is editable."""


class CommentResponse(ApiModel):
    id: uuid.UUID
    user: UserSummary = Field(description="Current author profile")
    recipe: uuid.UUID
    text: str
    name: Optional[str] = Field(default=None, description="Author name when the comment was written")
    avatar: Optional[str] = Field(default=None, description="Author avatar when the comment was written")
    likes: List[LikeEntry] = Field(default_factory=list)
    date: datetime
