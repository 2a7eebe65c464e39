"""
RecipeHub Backend — Shared Service Helpers
============================================

What:  Input presence checks and the flush wrapper every service writes through.

flush():
    Pushes pending changes to the database inside the request transaction
    (the commit happens in get_db_session). Store failures are translated:
        IntegrityError   → ConflictError (a unique index caught a race)
        SQLAlchemyError  → ServerError (details logged, never returned)
"""

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recipehub.exceptions import ConflictError, ServerError

logger = logging.getLogger(__name__)


def is_missing(value: Any) -> bool:
    """None, blank strings and empty lists all count as "not supplied"."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


async def flush(
    db: AsyncSession,
    operation: str,
    on_conflict: Optional[ConflictError] = None,
    constraint: Optional[str] = None,
) -> None:
    """
    Flush pending changes, translating store failures.

    on_conflict replaces the generic ConflictError; when `constraint` is given
    it is used only if that index or constraint is the one violated.
    """
    try:
        await db.flush()
    except IntegrityError as e:
        logger.warning("Integrity violation during %s: %s", operation, e.orig)
        if on_conflict is not None and (constraint is None or constraint in str(e.orig)):
            raise on_conflict from e
        raise ConflictError(context={"operation": operation}) from e
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, str(e), exc_info=True)
        raise ServerError(context={"operation": operation}) from e
