"""
RecipeHub Backend — Folder Schemas
====================================

Three read shapes:
    - FolderResponse:        recipes as a list of ids (owner's own listing, mutations)
    - FolderDetailResponse:  recipes inlined as summaries (GET /folders/{id})
    - PublicFolderResponse:  owner inlined (GET /folders/public/all)
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from recipehub.schemas.common import ApiModel, UserSummary, require_text


class FolderCreate(ApiModel):
    name: str = Field(max_length=200)
    description: Optional[str] = None
    is_public: bool = False

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        return require_text(v, "Name is required")


class FolderUpdate(ApiModel):
    """
    Merge-patch body. `name` is applied only when non-empty;
    `description` and `isPublic` are applied whenever they are sent,
    so a description can be cleared with an explicit null.
    """

    name: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    is_public: Optional[bool] = None


class FolderRecipeSummary(ApiModel):
    id: uuid.UUID
    title: str
    description: str
    image: Optional[str] = None
    date: datetime
    user: UserSummary


class FolderResponse(ApiModel):
    id: uuid.UUID
    user: uuid.UUID
    name: str
    description: Optional[str] = None
    is_public: bool
    recipes: List[uuid.UUID] = Field(default_factory=list)
    date: datetime


class FolderDetailResponse(FolderResponse):
    recipes: List[FolderRecipeSummary] = Field(default_factory=list)


class PublicFolderResponse(FolderResponse):
    user: UserSummary
