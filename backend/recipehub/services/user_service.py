"""
RecipeHub Backend — User Service
==================================

What:  Account administration and the per-user saved-recipes list.
Who:   Called by routes/users.py.

Deletion rules:
    A user who still owns recipes cannot be deleted ("User has assigned
    recipes"). Otherwise the account goes together with its saved list,
    its role requests and the reviews it wrote; recipes that lose a review
    get their rating recomputed in the same transaction.

Passwords are hashed with bcrypt via asyncio.to_thread().
"""

import asyncio
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import ConflictError, ValidationError
from recipehub.models.recipe import Recipe, RecipeReview
from recipehub.models.role_request import RoleRequest
from recipehub.models.user import SavedRecipe, User
from recipehub.roles import DEFAULT_ROLES, Role
from recipehub.schemas.common import MessageResponse
from recipehub.schemas.recipe import RecipeResponse
from recipehub.schemas.user import (
    SaveRecipeRequest,
    UserCreate,
    UserCreatedResponse,
    UserDelete,
    UserResponse,
    UserUpdate,
)
from recipehub.security import hash_password
from recipehub.services.common import flush, is_missing
from recipehub.services.recipe_service import recipe_service, recipe_to_response

logger = logging.getLogger(__name__)

DUPLICATE_USERNAME = "Duplicate username"


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        roles=list(user.roles),
        active=user.active,
        saved_recipes=user.saved_recipe_ids,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def role_labels(roles: Optional[List[Role]]) -> List[str]:
    """Deduplicated role labels in the order given, or the default roles."""
    if not roles:
        return list(DEFAULT_ROLES)
    labels: List[str] = []
    for role in roles:
        if role.value not in labels:
            labels.append(role.value)
    return labels


class UserService:

    async def username_taken(
        self,
        db: AsyncSession,
        username: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        query = select(User.id).where(func.lower(User.username) == username.lower())
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.first() is not None

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        result = await db.execute(select(User).order_by(User.created_at))
        users = result.scalars().all()
        if not users:
            raise ValidationError("No users found")
        return [user_to_response(user) for user in users]

    async def create_user(self, db: AsyncSession, payload: UserCreate) -> UserCreatedResponse:
        """
        Create an account; roles default to ["Reader"].

        Raises:
            ValidationError: username or password missing
            ConflictError:   username taken (any case)
        """
        if is_missing(payload.username) or is_missing(payload.password):
            raise ValidationError("All fields are required")

        username = payload.username.strip()
        if await self.username_taken(db, username):
            raise ConflictError(DUPLICATE_USERNAME, context={"username": username})

        digest = await asyncio.to_thread(hash_password, payload.password)
        user = User(
            username=username,
            password=digest,
            roles=role_labels(payload.roles),
            active=True,
            saved=[],
        )
        db.add(user)
        await flush(db, "create_user", on_conflict=ConflictError(DUPLICATE_USERNAME))

        logger.info("User %s created with roles %s", user.username, user.roles)
        return UserCreatedResponse(message=f"New user {user.username} created", id=user.id)

    async def update_user(self, db: AsyncSession, payload: UserUpdate) -> MessageResponse:
        """
        Replace username, roles and active flag; change the password only
        when a new one is supplied.
        """
        if (
            payload.id is None
            or is_missing(payload.username)
            or is_missing(payload.roles)
            or payload.active is None
        ):
            raise ValidationError("All fields except password are required")

        user = await recipe_service.load_user(db, payload.id)

        username = payload.username.strip()
        if await self.username_taken(db, username, exclude_id=user.id):
            raise ConflictError(DUPLICATE_USERNAME, context={"username": username})

        user.username = username
        user.roles = role_labels(payload.roles)
        user.active = payload.active
        if not is_missing(payload.password):
            user.password = await asyncio.to_thread(hash_password, payload.password)

        await flush(db, "update_user", on_conflict=ConflictError(DUPLICATE_USERNAME))
        logger.info("User %s updated", user.id)
        return MessageResponse(message=f"{user.username} updated")

    async def delete_user(self, db: AsyncSession, payload: UserDelete) -> MessageResponse:
        """
        Delete an account that owns no recipes.

        Raises:
            ValidationError: no id given, or the user still owns recipes
            NotFoundError:   unknown user
        """
        if payload.id is None:
            raise ValidationError("User ID Required")

        owned = await db.execute(select(Recipe.id).where(Recipe.user_id == payload.id).limit(1))
        if owned.first() is not None:
            raise ValidationError("User has assigned recipes", context={"user_id": str(payload.id)})

        user = await recipe_service.load_user(db, payload.id)
        username, deleted_id = user.username, user.id

        reviewed = await db.execute(
            select(Recipe)
            .join(RecipeReview, RecipeReview.recipe_id == Recipe.id)
            .where(RecipeReview.user_id == deleted_id)
        )
        for recipe in reviewed.scalars().all():
            recipe.reviews = [r for r in recipe.reviews if r.user_id != deleted_id]
            recipe.recompute_rating()

        await db.execute(delete(RoleRequest).where(RoleRequest.user_id == deleted_id))
        await db.delete(user)
        await flush(db, "delete_user")

        logger.info("User %s (%s) deleted", deleted_id, username)
        return MessageResponse(message=f"Username {username} with ID {deleted_id} deleted")

    async def list_saved_recipes(self, db: AsyncSession, user_id: UUID) -> List[RecipeResponse]:
        """The user's saved recipes in the order they were saved."""
        await recipe_service.load_user(db, user_id)
        result = await db.execute(
            select(Recipe)
            .join(SavedRecipe, SavedRecipe.recipe_id == Recipe.id)
            .where(SavedRecipe.user_id == user_id)
            .order_by(SavedRecipe.created_at)
        )
        return [recipe_to_response(recipe) for recipe in result.scalars().all()]

    async def toggle_saved_recipe(
        self,
        db: AsyncSession,
        user_id: UUID,
        payload: SaveRecipeRequest,
    ) -> List[UUID]:
        """
        Save the recipe if absent from the user's list, unsave it if present.

        Returns the saved recipe ids after the toggle.
        """
        if payload.recipe_id is None:
            raise ValidationError("Recipe ID required", field="recipeId")

        user = await recipe_service.load_user(db, user_id)
        if payload.recipe_id in user.saved_recipe_ids:
            user.saved = [entry for entry in user.saved if entry.recipe_id != payload.recipe_id]
            logger.info("User %s unsaved recipe %s", user.username, payload.recipe_id)
        else:
            recipe = await recipe_service.load_recipe(db, payload.recipe_id)
            user.saved = [*user.saved, SavedRecipe(recipe_id=recipe.id)]
            logger.info("User %s saved recipe %s", user.username, recipe.id)

        await flush(db, "toggle_saved_recipe")
        return user.saved_recipe_ids


user_service = UserService()
