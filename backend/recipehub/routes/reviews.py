"""
RecipeHub Backend — Review Route Handlers
===========================================

What:  /recipes/{recipe_id}/reviews list, add and delete.
Who:   Anyone may read reviews; any signed-in user may add one; only the
       author or an Admin may delete one (checked by ReviewService against
       the stored review).
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.auth import require
from recipehub.database import get_db_session
from recipehub.policy import Action, Principal
from recipehub.schemas.common import ErrorResponse
from recipehub.schemas.recipe import (
    ReviewAddedResponse,
    ReviewCreate,
    ReviewDeletedResponse,
    ReviewResponse,
)
from recipehub.services.review_service import review_service

router = APIRouter(tags=["Reviews"])


@router.get(
    "/recipes/{recipe_id}/reviews",
    response_model=List[ReviewResponse],
    responses={404: {"description": "Recipe not found", "model": ErrorResponse}},
    summary="List a recipe's reviews, newest first",
)
async def list_reviews(
    recipe_id: UUID,
    _: Optional[Principal] = Depends(require(Action.LIST_REVIEWS)),
    db: AsyncSession = Depends(get_db_session),
) -> List[ReviewResponse]:
    return await review_service.list_reviews(db, recipe_id)


@router.post(
    "/recipes/{recipe_id}/reviews",
    response_model=ReviewAddedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid review or recipe already reviewed", "model": ErrorResponse},
        401: {"description": "No bearer credential", "model": ErrorResponse},
        404: {"description": "Recipe not found", "model": ErrorResponse},
    },
    summary="Review a recipe",
)
async def add_review(
    recipe_id: UUID,
    payload: ReviewCreate,
    principal: Principal = Depends(require(Action.CREATE_REVIEW)),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewAddedResponse:
    return await review_service.add_review(db, recipe_id, principal.id, payload)


@router.delete(
    "/recipes/{recipe_id}/reviews/{review_id}",
    response_model=ReviewDeletedResponse,
    responses={
        401: {"description": "No bearer credential", "model": ErrorResponse},
        403: {"description": "Not authorized to delete this review", "model": ErrorResponse},
        404: {"description": "Recipe or review not found", "model": ErrorResponse},
    },
    summary="Delete a review",
)
async def delete_review(
    recipe_id: UUID,
    review_id: UUID,
    principal: Principal = Depends(require(Action.DELETE_REVIEW)),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewDeletedResponse:
    return await review_service.delete_review(db, recipe_id, review_id, principal)
