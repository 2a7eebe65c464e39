"""
RecipeHub Backend — Access Policy
===================================

What:  Decides whether a principal may perform an action.
How:   A table maps every Action to one rule: PUBLIC, AUTHENTICATED, or the
       set of roles allowed. `authorize` raises UnauthorizedError when a
       principal is required but absent and ForbiddenError when the principal
       lacks the role. Ownership checks (review author, role-request owner)
       take the owner id of the entity and apply the same split.
Who:   Called by the `require` dependency in auth.py and by services that
       need entity-level ownership checks.

This module is pure: no I/O, no FastAPI, no database.
"""

import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union
from uuid import UUID

from recipehub.exceptions import ForbiddenError, UnauthorizedError
from recipehub.roles import Role


@dataclass(frozen=True)
class Principal:
    """The verified caller: who they are and which roles their token carries."""

    id: UUID
    username: str
    roles: FrozenSet[Role]

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    def has_any(self, roles: FrozenSet[Role]) -> bool:
        return bool(self.roles & roles)


class Access(enum.Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"


class Action(str, enum.Enum):
    LIST_RECIPES = "list_recipes"
    MANAGE_RECIPES = "manage_recipes"
    READ_RECIPE = "read_recipe"
    CREATE_RECIPE = "create_recipe"
    UPDATE_RECIPE = "update_recipe"
    DELETE_RECIPE = "delete_recipe"

    LIST_REVIEWS = "list_reviews"
    CREATE_REVIEW = "create_review"
    DELETE_REVIEW = "delete_review"

    SUBMIT_ROLE_REQUEST = "submit_role_request"
    LIST_OWN_ROLE_REQUESTS = "list_own_role_requests"
    MARK_ROLE_REQUEST_READ = "mark_role_request_read"
    LIST_ROLE_REQUESTS = "list_role_requests"
    PROCESS_ROLE_REQUEST = "process_role_request"
    COUNT_PENDING_ROLE_REQUESTS = "count_pending_role_requests"

    MANAGE_USERS = "manage_users"
    SAVE_RECIPES = "save_recipes"


Rule = Union[Access, FrozenSet[Role]]

WRITERS: FrozenSet[Role] = frozenset({Role.WRITER, Role.ADMIN})
ADMINS: FrozenSet[Role] = frozenset({Role.ADMIN})

RULES: Dict[Action, Rule] = {
    Action.LIST_RECIPES: Access.PUBLIC,
    Action.MANAGE_RECIPES: WRITERS,
    Action.READ_RECIPE: Access.AUTHENTICATED,
    Action.CREATE_RECIPE: WRITERS,
    Action.UPDATE_RECIPE: WRITERS,
    Action.DELETE_RECIPE: ADMINS,

    Action.LIST_REVIEWS: Access.PUBLIC,
    Action.CREATE_REVIEW: Access.AUTHENTICATED,
    Action.DELETE_REVIEW: Access.AUTHENTICATED,

    Action.SUBMIT_ROLE_REQUEST: Access.AUTHENTICATED,
    Action.LIST_OWN_ROLE_REQUESTS: Access.AUTHENTICATED,
    Action.MARK_ROLE_REQUEST_READ: Access.AUTHENTICATED,
    Action.LIST_ROLE_REQUESTS: ADMINS,
    Action.PROCESS_ROLE_REQUEST: ADMINS,
    Action.COUNT_PENDING_ROLE_REQUESTS: ADMINS,

    Action.MANAGE_USERS: Access.AUTHENTICATED,
    Action.SAVE_RECIPES: Access.AUTHENTICATED,
}

_unruled = set(Action) - set(RULES)
if _unruled:
    raise RuntimeError(f"Access rules missing for: {sorted(a.value for a in _unruled)}")


def is_public(action: Action) -> bool:
    return RULES[action] is Access.PUBLIC


def authorize(action: Action, principal: Optional[Principal]) -> None:
    """
    Raise unless `principal` may perform `action`.

    Raises:
        UnauthorizedError: the action needs a principal and none was given
        ForbiddenError:    the principal holds none of the allowed roles
    """
    rule = RULES[action]
    if rule is Access.PUBLIC:
        return
    if principal is None:
        raise UnauthorizedError()
    if rule is Access.AUTHENTICATED:
        return
    if not principal.has_any(rule):
        raise ForbiddenError(context={"action": action.value})


def manage_scope(principal: Principal) -> Optional[UUID]:
    """Owner filter for the manage listing: None (everything) for Admins."""
    if principal.is_admin:
        return None
    return principal.id


def ensure_review_author_or_admin(principal: Optional[Principal], author_id: UUID) -> None:
    if principal is None:
        raise UnauthorizedError()
    if principal.id != author_id and not principal.is_admin:
        raise ForbiddenError(message="Not authorized to delete this review")


def ensure_owner(principal: Optional[Principal], owner_id: UUID) -> None:
    if principal is None:
        raise UnauthorizedError()
    if principal.id != owner_id:
        raise ForbiddenError(message="Not authorized")
