"""
RecipeHub Backend — Recipe Schemas
====================================

What:  Request bodies for creating, patching and forking recipes, and the
       recipe representations returned by the API.

Validation rules (create):
    - title, description: required, non-blank
    - ingredients, instructions: at least one entry each
    - cookingTime, servings: numeric
    - parentRecipe: optional; when present the recipe is created as a fork
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from recipehub.schemas.common import ApiModel, LikeEntry, UserSummary, require_text


# ══════════════════════════════════════════════════════════════════════════
# Embedded sub-documents
# ══════════════════════════════════════════════════════════════════════════


class Ingredient(ApiModel):
    name: str = Field(min_length=1, max_length=200)
    quantity: str = Field(min_length=1, max_length=50)
    unit: Optional[str] = Field(default=None, max_length=50)

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, v: Any) -> Any:
        """Quantities are free text ("1/2", "2", "a pinch"); numbers are accepted too."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class Instruction(ApiModel):
    step: int = Field(ge=1)
    text: str = Field(min_length=1)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RecipeCreate(ApiModel):
    title: str = Field(max_length=200)
    description: str
    ingredients: List[Ingredient]
    instructions: List[Instruction]
    cooking_time: int = Field(ge=0, description="Minutes")
    servings: int = Field(ge=1)
    image: Optional[str] = None
    tags: Optional[List[str]] = None
    parent_recipe: Optional[uuid.UUID] = Field(
        default=None, description="Create this recipe as a fork of an existing one"
    )
    modifications: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return require_text(v, "Title is required")

    @field_validator("description")
    @classmethod
    def description_required(cls, v: str) -> str:
        return require_text(v, "Description is required")

    @field_validator("ingredients")
    @classmethod
    def at_least_one_ingredient(cls, v: List[Ingredient]) -> List[Ingredient]:
        if not v:
            raise ValueError("At least one ingredient is required")
        return v

    @field_validator("instructions")
    @classmethod
    def at_least_one_instruction(cls, v: List[Instruction]) -> List[Instruction]:
        if not v:
            raise ValueError("At least one instruction is required")
        return v


class RecipeUpdate(ApiModel):
    """
    Merge-patch body: only fields that are present and non-null are applied.

    Ownership and fork lineage are not patchable fields.
    """

    title: Optional[str] = Field(default=None, max_length=200)
    description: Optional[str] = None
    ingredients: Optional[List[Ingredient]] = None
    instructions: Optional[List[Instruction]] = None
    cooking_time: Optional[int] = Field(default=None, ge=0)
    servings: Optional[int] = Field(default=None, ge=1)
    image: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v, "Title cannot be empty")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v, "Description cannot be empty")

    @field_validator("ingredients")
    @classmethod
    def ingredients_not_empty(cls, v: Optional[List[Ingredient]]) -> Optional[List[Ingredient]]:
        if v is not None and not v:
            raise ValueError("At least one ingredient is required")
        return v

    @field_validator("instructions")
    @classmethod
    def instructions_not_empty(cls, v: Optional[List[Instruction]]) -> Optional[List[Instruction]]:
        if v is not None and not v:
            raise ValueError("At least one instruction is required")
        return v


class ForkRequest(ApiModel):
    modifications: Optional[str] = Field(
        default=None, description="What the fork changes; defaults to 'Forked recipe'"
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class RecipeResponse(ApiModel):
    id: uuid.UUID
    user: UserSummary
    title: str
    description: str
    ingredients: List[Ingredient]
    instructions: List[Instruction]
    cooking_time: int
    servings: int
    image: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    parent_recipe: Optional[uuid.UUID] = None
    is_forked: bool = False
    modifications: Optional[str] = None
    likes: List[LikeEntry] = Field(default_factory=list)
    date: datetime


class RecipeDetailResponse(RecipeResponse):
    """Single-recipe view with the parent recipe inlined (null if it no longer exists)."""

    parent_recipe: Optional[RecipeResponse] = None
