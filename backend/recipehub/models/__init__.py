# Models package init
"""
Importing this package registers every table with Base.metadata, which
Alembic autogenerate and the test suite's create_all rely on.
"""

from recipehub.models.user import SavedRecipe, User
from recipehub.models.recipe import Counter, Recipe, RecipeReview
from recipehub.models.role_request import DECISIONS, RequestStatus, RoleRequest

__all__ = [
    "Counter",
    "DECISIONS",
    "Recipe",
    "RecipeReview",
    "RequestStatus",
    "RoleRequest",
    "SavedRecipe",
    "User",
]
