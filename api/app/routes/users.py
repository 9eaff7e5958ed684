"""User directory endpoints. Updates and deletes are limited to the caller's own account."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.redis import invalidate_pattern
from app.middleware.auth import CurrentUser
from app.schemas import MessageResponse, UserResponse, UserUpdate
from app.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return [UserResponse.model_validate(u) for u in await user_service.list_users(db)]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    return UserResponse.model_validate(await user_service.get_user(db, user_id))


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    body: UserUpdate,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    target = await user_service.update_user(
        db, user_id, body.model_dump(exclude_unset=True, mode="json"), user.id
    )
    await db.commit()
    return UserResponse.model_validate(target)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await user_service.delete_user(db, user_id, user.id)
    await db.commit()
    await invalidate_pattern("dashboard:*")
    return result
