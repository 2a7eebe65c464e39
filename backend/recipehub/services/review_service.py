"""
RecipeHub Backend — Review Service
====================================

What:  Adds, lists and deletes the reviews embedded in a recipe.
How:   Reviews are only reached through their recipe. Every add or delete
       ends with Recipe.recompute_rating(), so rating and ratingsCount are
       always derived from the full review list rather than adjusted
       incrementally.
Who:   Called by routes/reviews.py.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import DuplicateReviewError, NotFoundError, ValidationError
from recipehub.models.recipe import RecipeReview
from recipehub.policy import Principal, ensure_review_author_or_admin
from recipehub.schemas.recipe import (
    ReviewAddedResponse,
    ReviewCreate,
    ReviewDeletedResponse,
    ReviewResponse,
)
from recipehub.services.common import flush, is_missing
from recipehub.services.recipe_service import (
    recipe_service,
    review_to_response,
    reviews_newest_first,
)

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class ReviewService:

    async def add_review(
        self,
        db: AsyncSession,
        recipe_id: UUID,
        author_id: UUID,
        payload: ReviewCreate,
    ) -> ReviewAddedResponse:
        """
        Attach a review by `author_id` to a recipe and refresh its rating.

        Raises:
            ValidationError:      rating or comment missing, rating outside 1-5
            NotFoundError:        unknown recipe
            DuplicateReviewError: the author already reviewed this recipe
        """
        if payload.rating is None or is_missing(payload.comment):
            raise ValidationError("Rating and comment are required")
        if not MIN_RATING <= payload.rating <= MAX_RATING:
            raise ValidationError("Rating must be between 1 and 5", field="rating")

        recipe = await recipe_service.load_recipe(db, recipe_id)
        if recipe.review_by(author_id) is not None:
            raise DuplicateReviewError(context={"recipe_id": str(recipe_id)})

        author = await recipe_service.load_user(db, author_id)
        review = RecipeReview(author=author, rating=payload.rating, comment=payload.comment.strip())
        recipe.reviews.append(review)
        recipe.recompute_rating()

        await flush(db, "add_review", on_conflict=DuplicateReviewError())
        logger.info(
            "Review %s added to recipe %s (rating=%.2f, count=%d)",
            review.id, recipe.id, recipe.rating, recipe.ratings_count,
        )
        return ReviewAddedResponse(
            review=review_to_response(review),
            new_rating=recipe.rating,
            ratings_count=recipe.ratings_count,
        )

    async def list_reviews(self, db: AsyncSession, recipe_id: UUID) -> List[ReviewResponse]:
        """A recipe's reviews, newest first."""
        recipe = await recipe_service.load_recipe(db, recipe_id)
        return reviews_newest_first(recipe)

    async def delete_review(
        self,
        db: AsyncSession,
        recipe_id: UUID,
        review_id: UUID,
        principal: Principal,
    ) -> ReviewDeletedResponse:
        """
        Remove a review. Only its author or an Admin may do this.

        Raises:
            NotFoundError:  unknown recipe or review
            ForbiddenError: caller is neither the author nor an Admin
        """
        recipe = await recipe_service.load_recipe(db, recipe_id)
        review = recipe.find_review(review_id)
        if review is None:
            raise NotFoundError(
                resource="review",
                resource_id=str(review_id),
                message="Review not found",
            )

        ensure_review_author_or_admin(principal, review.user_id)

        recipe.remove_review(review_id)
        recipe.recompute_rating()
        await flush(db, "delete_review")

        logger.info("Review %s removed from recipe %s by %s", review_id, recipe.id, principal.username)
        return ReviewDeletedResponse(new_rating=recipe.rating, ratings_count=recipe.ratings_count)


review_service = ReviewService()
