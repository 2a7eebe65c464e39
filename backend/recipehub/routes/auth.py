"""
RecipeHub Backend — Login Route
=================================

What:  POST /auth exchanges username and password for a bearer token.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.database import get_db_session
from recipehub.schemas.common import ErrorResponse
from recipehub.schemas.user import LoginRequest, TokenResponse
from recipehub.services.auth_service import auth_service

router = APIRouter(tags=["Auth"])


@router.post(
    "/auth",
    response_model=TokenResponse,
    responses={
        400: {"description": "All fields are required", "model": ErrorResponse},
        401: {"description": "Unknown account, inactive account or wrong password", "model": ErrorResponse},
    },
    summary="Log in",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    return await auth_service.login(db, payload)
