"""
RecipeHub Backend — Login Service
===================================

What:  Exchanges a username and password for a signed bearer token.
How:   Looks the account up case-insensitively, checks it is active and
       verifies the bcrypt digest. Every failure answers the same
       UnauthorizedError so the response does not reveal which part was wrong.
"""

import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import UnauthorizedError, ValidationError
from recipehub.models.user import User
from recipehub.schemas.user import LoginRequest, TokenResponse
from recipehub.security import create_access_token, verify_password
from recipehub.services.common import is_missing

logger = logging.getLogger(__name__)


class AuthService:

    async def login(self, db: AsyncSession, payload: LoginRequest) -> TokenResponse:
        if is_missing(payload.username) or is_missing(payload.password):
            raise ValidationError("All fields are required")

        result = await db.execute(
            select(User).where(func.lower(User.username) == payload.username.strip().lower())
        )
        user = result.scalar_one_or_none()

        if user is None or not user.active:
            logger.info("Login refused for '%s': unknown or inactive account", payload.username)
            raise UnauthorizedError()

        if not await asyncio.to_thread(verify_password, payload.password, user.password):
            logger.info("Login refused for '%s': bad password", user.username)
            raise UnauthorizedError()

        token = create_access_token(user.id, user.username, user.roles)
        logger.info("User %s logged in", user.username)
        return TokenResponse(access_token=token)


auth_service = AuthService()
