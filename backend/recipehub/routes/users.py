"""
RecipeHub Backend — User Route Handlers
=========================================

What:  /users account management and the caller's saved-recipes list.
How:   Account routes take the target user id in the JSON body, including
       DELETE. Saved-recipe routes always act on the caller's own account.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.auth import require
from recipehub.database import get_db_session
from recipehub.policy import Action, Principal
from recipehub.schemas.common import ErrorResponse, MessageResponse
from recipehub.schemas.recipe import RecipeResponse
from recipehub.schemas.user import (
    SaveRecipeRequest,
    UserCreate,
    UserCreatedResponse,
    UserDelete,
    UserResponse,
    UserUpdate,
)
from recipehub.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=List[UserResponse],
    responses={400: {"description": "No users found", "model": ErrorResponse}},
    summary="List accounts",
)
async def list_users(
    _: Principal = Depends(require(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserResponse]:
    return await user_service.list_users(db)


@router.post(
    "",
    response_model=UserCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "All fields are required", "model": ErrorResponse},
        409: {"description": "Duplicate username", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def create_user(
    payload: UserCreate,
    _: Principal = Depends(require(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db_session),
) -> UserCreatedResponse:
    return await user_service.create_user(db, payload)


@router.patch(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "All fields except password are required", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        409: {"description": "Duplicate username", "model": ErrorResponse},
    },
    summary="Update an account",
)
async def update_user(
    payload: UserUpdate,
    _: Principal = Depends(require(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await user_service.update_user(db, payload)


@router.delete(
    "",
    response_model=MessageResponse,
    responses={
        400: {"description": "No id given, or the user owns recipes", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete an account that owns no recipes",
)
async def delete_user(
    payload: UserDelete,
    _: Principal = Depends(require(Action.MANAGE_USERS)),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await user_service.delete_user(db, payload)


@router.get(
    "/saved-recipes",
    response_model=List[RecipeResponse],
    summary="The caller's saved recipes, in the order they were saved",
)
async def list_saved_recipes(
    principal: Principal = Depends(require(Action.SAVE_RECIPES)),
    db: AsyncSession = Depends(get_db_session),
) -> List[RecipeResponse]:
    return await user_service.list_saved_recipes(db, principal.id)


@router.patch(
    "/save-recipe",
    response_model=List[UUID],
    responses={404: {"description": "Recipe not found", "model": ErrorResponse}},
    summary="Save or unsave a recipe",
    description="Adds the recipe to the caller's saved list, or removes it if already saved.",
)
async def toggle_saved_recipe(
    payload: SaveRecipeRequest,
    principal: Principal = Depends(require(Action.SAVE_RECIPES)),
    db: AsyncSession = Depends(get_db_session),
) -> List[UUID]:
    return await user_service.toggle_saved_recipe(db, principal.id, payload)
