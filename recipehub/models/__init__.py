"""
RecipeHub Backend — ORM Models
================================

Importing this package registers every table with `Base.metadata`
(used by Alembic autogenerate and by the test suite's create_all).
"""

from recipehub.models.comment import Comment
from recipehub.models.folder import Folder
from recipehub.models.recipe import Recipe
from recipehub.models.user import User

__all__ = ["Comment", "Folder", "Recipe", "User"]
