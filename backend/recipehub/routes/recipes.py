"""
RecipeHub Backend — Recipe Route Handlers
===========================================

What:  /recipes list, manage view, detail, create, update and delete.
How:   Each handler declares its Action through `require(...)`, which
       authenticates the caller and applies the access policy, then
       delegates to RecipeService.

Route ordering:
    /recipes/manage is declared before /recipes/{recipe_id} so "manage" is
    never parsed as a recipe id.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.auth import require
from recipehub.database import get_db_session
from recipehub.policy import Action, Principal, manage_scope
from recipehub.schemas.common import ErrorResponse
from recipehub.schemas.recipe import (
    RecipeCreate,
    RecipeMutationResponse,
    RecipeResponse,
    RecipeUpdate,
)
from recipehub.services.recipe_service import recipe_service

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(tags=["Recipes"])

AUTH_ERRORS = {
    401: {"description": "No bearer credential", "model": ErrorResponse},
    403: {"description": "Invalid credential or insufficient role", "model": ErrorResponse},
}


@router.get(
    "/recipes",
    response_model=List[RecipeResponse],
    summary="List all recipes",
)
async def list_recipes(
    _: Optional[Principal] = Depends(require(Action.LIST_RECIPES)),
    db: AsyncSession = Depends(get_db_session),
) -> List[RecipeResponse]:
    return await recipe_service.list_recipes(db)


@router.get(
    "/recipes/manage",
    response_model=List[RecipeResponse],
    responses=AUTH_ERRORS,
    summary="List the recipes the caller may manage",
    description="Writers see their own recipes; Admins see every recipe.",
)
async def manage_recipes(
    principal: Principal = Depends(require(Action.MANAGE_RECIPES)),
    db: AsyncSession = Depends(get_db_session),
) -> List[RecipeResponse]:
    return await recipe_service.list_recipes(db, owner_id=manage_scope(principal))


@router.get(
    "/recipes/{recipe_id}",
    response_model=RecipeResponse,
    responses={**AUTH_ERRORS, 404: {"description": "Recipe not found", "model": ErrorResponse}},
    summary="Get a single recipe with its reviews",
)
async def get_recipe(
    recipe_id: UUID,
    _: Principal = Depends(require(Action.READ_RECIPE)),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    return await recipe_service.get_recipe(db, recipe_id)


@router.post(
    "/recipes",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **AUTH_ERRORS,
        400: {"description": "Missing required fields", "model": ErrorResponse},
        409: {"description": "Duplicate recipe title", "model": ErrorResponse},
    },
    summary="Create a recipe",
)
async def create_recipe(
    payload: RecipeCreate,
    principal: Principal = Depends(require(Action.CREATE_RECIPE)),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeResponse:
    """
    Create a recipe owned by the caller.

    ingredients and instructions may be sent as a list of lines or as one
    newline-separated string; the response always carries lists.
    """
    return await recipe_service.create_recipe(db, principal.id, payload)


@router.patch(
    "/recipes/{recipe_id}",
    response_model=RecipeMutationResponse,
    responses={
        **AUTH_ERRORS,
        400: {"description": "All fields are required", "model": ErrorResponse},
        404: {"description": "Recipe or owner not found", "model": ErrorResponse},
        409: {"description": "Duplicate recipe title", "model": ErrorResponse},
    },
    summary="Update a recipe",
)
async def update_recipe(
    recipe_id: UUID,
    payload: RecipeUpdate,
    _: Principal = Depends(require(Action.UPDATE_RECIPE)),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeMutationResponse:
    return await recipe_service.update_recipe(db, recipe_id, payload)


@router.delete(
    "/recipes/{recipe_id}",
    response_model=RecipeMutationResponse,
    responses={**AUTH_ERRORS, 404: {"description": "Recipe not found", "model": ErrorResponse}},
    summary="Delete a recipe and its reviews",
)
async def delete_recipe(
    recipe_id: UUID,
    _: Principal = Depends(require(Action.DELETE_RECIPE)),
    db: AsyncSession = Depends(get_db_session),
) -> RecipeMutationResponse:
    return await recipe_service.delete_recipe(db, recipe_id)
