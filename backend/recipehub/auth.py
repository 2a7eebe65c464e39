"""
RecipeHub Backend — Request Authentication Dependency
=======================================================

What:  FastAPI dependency that turns the Authorization header into a Principal
       and applies the access policy for the route's Action.
How:   `require(Action.X)` returns a dependency. Public actions skip token
       verification entirely. Otherwise:
           no bearer credential       → UnauthorizedError (401)
           credential fails to verify → ForbiddenError (403)
           role not allowed           → ForbiddenError (403)

Usage:
    @router.post("/recipes")
    async def create_recipe(
        principal: Principal = Depends(require(Action.CREATE_RECIPE)),
    ): ...
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from recipehub.exceptions import ForbiddenError, UnauthorizedError
from recipehub.middleware.request_id import request_id_var
from recipehub.policy import Action, Principal, authorize, is_public
from recipehub.security import InvalidTokenError, decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header reaches us as None so we can answer 401
bearer_scheme = HTTPBearer(auto_error=False)


def principal_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError()
    try:
        return decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.info("[%s] Rejected bearer token: %s", request_id_var.get(""), e)
        raise ForbiddenError()


def require(action: Action):
    """Build the dependency enforcing `action`'s access rule."""

    async def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    ) -> Optional[Principal]:
        if is_public(action):
            return None
        principal = principal_from_credentials(credentials)
        authorize(action, principal)
        return principal

    dependency.__name__ = f"require_{action.value}"
    return dependency
