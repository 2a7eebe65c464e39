"""
RecipeHub Backend — Credential Primitives
===========================================

What:  Password hashing (bcrypt) and bearer token signing/verification (PyJWT).
Who:   auth_service (login), user_service (account writes), auth.py (requests).

Token claims:
    sub       user id (UUID string)
    username  account name at issue time
    roles     role labels at issue time
    iat/exp   issue and expiry timestamps
"""

import logging
from datetime import timedelta
from typing import List, Optional
from uuid import UUID

import bcrypt
import jwt

from recipehub.config import settings
from recipehub.database import utcnow
from recipehub.policy import Principal
from recipehub.roles import parse_roles

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """The token is malformed, tampered with, expired or missing claims."""


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Compare a plaintext password to a stored digest; a malformed digest never matches."""
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        logger.warning("Stored password digest is not a valid bcrypt hash")
        return False


def create_access_token(
    user_id: UUID,
    username: str,
    roles: List[str],
    expires_minutes: Optional[int] = None,
) -> str:
    now = utcnow()
    lifetime = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload = {
        "sub": str(user_id),
        "username": username,
        "roles": list(roles),
        "iat": now,
        "exp": now + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.access_token_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Principal:
    """
    Verify a bearer token and return the principal it describes.

    Raises:
        InvalidTokenError: bad signature, expired, or claims missing/malformed
    """
    try:
        payload = jwt.decode(
            token,
            settings.access_token_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(str(e)) from e

    try:
        user_id = UUID(payload["sub"])
    except (TypeError, ValueError) as e:
        raise InvalidTokenError("Token subject is not a user id") from e

    roles = payload.get("roles") or []
    if not isinstance(roles, list):
        raise InvalidTokenError("Token roles claim must be a list")

    return Principal(
        id=user_id,
        username=str(payload.get("username", "")),
        roles=parse_roles(str(role) for role in roles),
    )
