"""
RecipeHub Backend — Recipe Service (Business Logic)
=====================================================

What:  Listing, reading, creating, updating and deleting recipes.
How:   Stateless service; every method receives the request's AsyncSession.
       Changes are flushed, never committed (commit happens in get_db_session).
Who:   Called by routes/recipes.py and routes/users.py (saved recipes);
       review_service reuses load_recipe().

Create Flow (POST /recipes):
    ┌───────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │  Required │───▶│ Title unique │───▶│ Next ticket  │───▶│  Flush   │
    │  fields   │    │ (lower())    │    │ (counters)   │    │  (DB)    │
    └───────────┘    └──────────────┘    └──────────────┘    └──────────┘

Tickets:
    Drawn from the `recipe_ticket` row in `counters` under SELECT ... FOR UPDATE.
    The row is seeded by the migration; a missing row is inserted with
    ON CONFLICT DO NOTHING before locking, so first creates cannot collide.
    The first recipe gets settings.ticket_start (500); numbers are never
    reused after a delete.
"""

import logging
from typing import List, Optional, Sequence
from uuid import UUID

from pydantic.alias_generators import to_camel
from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.config import settings
from recipehub.exceptions import ConflictError, NotFoundError, ValidationError
from recipehub.models.recipe import Counter, Recipe, RecipeReview
from recipehub.models.user import SavedRecipe, User
from recipehub.schemas.common import AuthorRef
from recipehub.schemas.recipe import (
    Lines,
    RecipeCreate,
    RecipeMutationResponse,
    RecipeResponse,
    RecipeUpdate,
    ReviewResponse,
)
from recipehub.services.common import flush, is_missing

logger = logging.getLogger(__name__)

TICKET_COUNTER = "recipe_ticket"

REQUIRED_ON_CREATE = ("title", "ingredients", "instructions", "cooking_time")
REQUIRED_ON_UPDATE = ("user", "title", "ingredients", "instructions")

DUPLICATE_TITLE = "Duplicate recipe title"
TITLE_INDEX = "uq_recipes_title_lower"


# ── Line lists ────────────────────────────────────────────────────────────


def join_lines(value: Lines) -> str:
    if isinstance(value, list):
        return "\n".join(line.strip() for line in value)
    return value.strip()


def split_lines(text: str) -> List[str]:
    return [line for line in text.split("\n") if line.strip()]


# ── Response builders ─────────────────────────────────────────────────────


def author_ref(user: User) -> AuthorRef:
    return AuthorRef(id=user.id, username=user.username)


def review_to_response(review: RecipeReview) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        user=author_ref(review.author),
        rating=review.rating,
        comment=review.comment,
        created_at=review.created_at,
    )


def reviews_newest_first(recipe: Recipe) -> List[ReviewResponse]:
    # The relationship loads oldest first
    return [review_to_response(r) for r in reversed(recipe.reviews)]


def recipe_to_response(recipe: Recipe) -> RecipeResponse:
    return RecipeResponse(
        id=recipe.id,
        user=author_ref(recipe.author),
        title=recipe.title,
        image=recipe.image,
        ingredients=split_lines(recipe.ingredients),
        instructions=split_lines(recipe.instructions),
        cooking_time=recipe.cooking_time,
        category=recipe.category,
        ticket=recipe.ticket,
        rating=recipe.rating,
        ratings_count=recipe.ratings_count,
        reviews=reviews_newest_first(recipe),
        created_at=recipe.created_at,
        updated_at=recipe.updated_at,
    )


def missing_fields(payload, names: Sequence[str]) -> List[str]:
    """camelCase names of the fields in `names` that the payload left out."""
    return [to_camel(name) for name in names if is_missing(getattr(payload, name))]


class RecipeService:
    """
    Business logic layer for recipes.

    Responsibilities:
        - list_recipes(): every recipe, or only one owner's (manage view)
        - get_recipe(): a single recipe with its reviews
        - create_recipe() / update_recipe() / delete_recipe()
    """

    async def load_recipe(self, db: AsyncSession, recipe_id: UUID) -> Recipe:
        recipe = await db.get(Recipe, recipe_id)
        if recipe is None:
            raise NotFoundError(
                resource="recipe",
                resource_id=str(recipe_id),
                message="Recipe not found",
            )
        return recipe

    async def load_user(self, db: AsyncSession, user_id: UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(
                resource="user",
                resource_id=str(user_id),
                message="User not found",
            )
        return user

    async def title_taken(
        self,
        db: AsyncSession,
        title: str,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        query = select(Recipe.id).where(func.lower(Recipe.title) == title.lower())
        if exclude_id is not None:
            query = query.where(Recipe.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.first() is not None

    async def next_ticket(self, db: AsyncSession) -> int:
        """Hand out the next ticket number, starting at settings.ticket_start."""
        counter = await self._lock_counter(db)
        if counter is None:
            await self._seed_counter(db)
            counter = await self._lock_counter(db)
        counter.seq += 1
        return counter.seq

    async def _lock_counter(self, db: AsyncSession) -> Optional[Counter]:
        result = await db.execute(
            select(Counter).where(Counter.name == TICKET_COUNTER).with_for_update()
        )
        return result.scalar_one_or_none()

    async def _seed_counter(self, db: AsyncSession) -> None:
        """Insert the counter row unless a concurrent request already did."""
        dialect = db.get_bind().dialect.name
        upsert = pg_insert if dialect == "postgresql" else sqlite_insert
        await db.execute(
            upsert(Counter)
            .values(name=TICKET_COUNTER, seq=settings.ticket_start - 1)
            .on_conflict_do_nothing(index_elements=[Counter.name])
        )

    async def list_recipes(
        self,
        db: AsyncSession,
        owner_id: Optional[UUID] = None,
    ) -> List[RecipeResponse]:
        """
        List recipes in ticket order.

        owner_id restricts the list to one author (GET /recipes/manage for
        Writers); None lists everything.
        """
        query = select(Recipe).order_by(Recipe.ticket)
        if owner_id is not None:
            query = query.where(Recipe.user_id == owner_id)
        result = await db.execute(query)
        return [recipe_to_response(recipe) for recipe in result.scalars().all()]

    async def get_recipe(self, db: AsyncSession, recipe_id: UUID) -> RecipeResponse:
        recipe = await self.load_recipe(db, recipe_id)
        return recipe_to_response(recipe)

    async def create_recipe(
        self,
        db: AsyncSession,
        author_id: UUID,
        payload: RecipeCreate,
    ) -> RecipeResponse:
        """
        Create a recipe owned by `author_id`.

        Raises:
            ValidationError: "Missing required fields: ..." naming every gap
            ConflictError:   another recipe has the same title (any case)
            NotFoundError:   the author account no longer exists
        """
        missing = missing_fields(payload, REQUIRED_ON_CREATE)
        if missing:
            raise ValidationError(
                message=f"Missing required fields: {', '.join(missing)}",
                context={"missing": missing},
            )

        title = payload.title.strip()
        if await self.title_taken(db, title):
            raise ConflictError(DUPLICATE_TITLE, context={"title": title})

        author = await self.load_user(db, author_id)

        recipe = Recipe(
            author=author,
            title=title,
            image=payload.image or settings.default_recipe_image,
            ingredients=join_lines(payload.ingredients),
            instructions=join_lines(payload.instructions),
            cooking_time=payload.cooking_time,
            category=(payload.category or "").strip() or settings.default_category,
            ticket=await self.next_ticket(db),
            rating=0.0,
            ratings_count=0,
            reviews=[],
        )
        db.add(recipe)
        await flush(
            db,
            "create_recipe",
            on_conflict=ConflictError(DUPLICATE_TITLE),
            constraint=TITLE_INDEX,
        )
        logger.info("Recipe %s created (ticket=%d, author=%s)", recipe.id, recipe.ticket, author.username)
        return recipe_to_response(recipe)

    async def update_recipe(
        self,
        db: AsyncSession,
        recipe_id: UUID,
        payload: RecipeUpdate,
    ) -> RecipeMutationResponse:
        """
        Replace a recipe's editable fields. Rating, ratingsCount, ticket and
        reviews are never touched here.

        Raises:
            ValidationError: "All fields are required"
            NotFoundError:   unknown recipe, or unknown owner in `user`
            ConflictError:   the new title belongs to another recipe
        """
        if missing_fields(payload, REQUIRED_ON_UPDATE):
            raise ValidationError("All fields are required")

        recipe = await self.load_recipe(db, recipe_id)

        title = payload.title.strip()
        if await self.title_taken(db, title, exclude_id=recipe.id):
            raise ConflictError(DUPLICATE_TITLE, context={"title": title})

        if payload.user != recipe.user_id:
            recipe.author = await self.load_user(db, payload.user)

        recipe.title = title
        recipe.image = payload.image or settings.default_recipe_image
        recipe.ingredients = join_lines(payload.ingredients)
        recipe.instructions = join_lines(payload.instructions)
        if payload.cooking_time is not None:
            recipe.cooking_time = payload.cooking_time
        if not is_missing(payload.category):
            recipe.category = payload.category.strip()

        await flush(
            db,
            "update_recipe",
            on_conflict=ConflictError(DUPLICATE_TITLE),
            constraint=TITLE_INDEX,
        )
        logger.info("Recipe %s updated", recipe.id)
        return RecipeMutationResponse(message=f"'{recipe.title}' updated", id=recipe.id)

    async def delete_recipe(self, db: AsyncSession, recipe_id: UUID) -> RecipeMutationResponse:
        """Delete a recipe with its reviews and drop it from every saved list."""
        recipe = await self.load_recipe(db, recipe_id)
        title, deleted_id = recipe.title, recipe.id

        await db.execute(delete(SavedRecipe).where(SavedRecipe.recipe_id == deleted_id))
        await db.delete(recipe)
        await flush(db, "delete_recipe")

        logger.info("Recipe %s deleted ('%s')", deleted_id, title)
        return RecipeMutationResponse(message=f"Recipe '{title}' deleted", id=deleted_id)


# ── Singleton Instance ────────────────────────────────────────────────────
recipe_service = RecipeService()
