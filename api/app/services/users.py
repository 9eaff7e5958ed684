"""User directory service.

Account changes are self-service only: a caller may update or delete its own
record and nobody else's. ``role`` is stored and returned but no operation
authorizes on it.
"""

from __future__ import annotations

import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenError, NotFoundError
from app.core.logging import get_logger
from app.models.models import User
from app.services.projects import delete_projects_for_owner
from app.services.repository import Repository, parse_id

logger = get_logger(__name__)

UPDATABLE_FIELDS = ("display_name", "role")


async def list_users(db: AsyncSession) -> list[User]:
    return await Repository(db, User).find_many(order_by=User.created_at.asc())


async def get_user(db: AsyncSession, user_id: uuid.UUID | str) -> User:
    user = await Repository(db, User).find_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    users = await Repository(db, User).find_many(User.email == email.lower(), limit=1)
    return users[0] if users else None


async def _get_own_account(db: AsyncSession, user_id: uuid.UUID | str, caller_id: uuid.UUID) -> User:
    user = await get_user(db, user_id)
    if user.id != caller_id:
        raise ForbiddenError("Access denied")
    return user


async def update_user(
    db: AsyncSession,
    user_id: uuid.UUID | str,
    patch: dict,
    caller_id: uuid.UUID,
) -> User:
    await _get_own_account(db, user_id, caller_id)
    values = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS and v is not None}
    if values:
        await Repository(db, User).update_by_id(user_id, values)
        logger.info("user_updated", user_id=str(user_id), fields=list(values))
    return await get_user(db, user_id)


async def delete_user(db: AsyncSession, user_id: uuid.UUID | str, caller_id: uuid.UUID) -> dict:
    """Delete the caller's own account together with the projects it owns."""
    user = await _get_own_account(db, user_id, caller_id)
    removed = await delete_projects_for_owner(db, user.id)
    await Repository(db, User).delete_by_id(parse_id(user_id))
    logger.info("user_deleted", user_id=str(user.id), projects_removed=removed)
    return {"message": "User deleted successfully"}
